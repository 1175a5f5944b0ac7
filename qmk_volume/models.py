"""
Shared models for QMK Volume Sync
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class NodeVolume(BaseModel):
    """Last known volume facts of one audio node"""

    name: str
    volume: float = Field(..., description="Linear volume of the first channel")
    muted: bool

    def merged(
        self, volume: Optional[float] = None, muted: Optional[bool] = None
    ) -> "NodeVolume":
        """Return a copy with the supplied fields replaced"""
        return NodeVolume(
            name=self.name,
            volume=self.volume if volume is None else volume,
            muted=self.muted if muted is None else muted,
        )

    def info(self) -> "VolumeInfo":
        return VolumeInfo(volume=self.volume, muted=self.muted)


class VolumeInfo(BaseModel):
    """Effective volume of the default output device"""

    model_config = ConfigDict(frozen=True)

    volume: float
    muted: bool
