"""
Settings for QMK Volume Sync, read from QMK_VOLUME_* environment variables
"""

import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .device import DeviceFilter

KEYCHRON = 0x3434
V3_MAX = 0x0934


class FilterMode(str, Enum):
    NONE = "none"
    VENDOR = "vendor"
    PRODUCT = "product"


class Settings(BaseModel):
    filter: FilterMode = Field(default=FilterMode.PRODUCT, description="How to select keyboards")
    vendor_id: int = Field(default=KEYCHRON, ge=0, le=0xFFFF, description="USB vendor id")
    product_id: int = Field(default=V3_MAX, ge=0, le=0xFFFF, description="USB product id")
    pacing_ms: int = Field(default=50, ge=0, description="Delay after each device write")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Log file path override")
    pw_dump: str = Field(
        default="pw-dump --monitor --no-colors", description="Command streaming PipeWire objects"
    )

    @field_validator("vendor_id", "product_id", mode="before")
    @classmethod
    def _parse_id(cls, value):
        if isinstance(value, str):
            return int(value, 0)
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    def device_filter(self) -> DeviceFilter:
        if self.filter == FilterMode.NONE:
            return DeviceFilter.none()
        if self.filter == FilterMode.VENDOR:
            return DeviceFilter.vendor(self.vendor_id)
        return DeviceFilter.product(self.vendor_id, self.product_id)

    @property
    def pacing(self) -> float:
        return self.pacing_ms / 1000


def load_settings(environ=None) -> Settings:
    """Build settings from the environment, unset variables keep their defaults"""
    environ = os.environ if environ is None else environ
    values = {}
    for name in Settings.model_fields:
        key = f"QMK_VOLUME_{name.upper()}"
        if environ.get(key):
            values[name] = environ[key]
    return Settings(**values)
