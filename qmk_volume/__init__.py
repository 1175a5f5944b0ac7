"""
QMK Volume Sync - mirrors the PipeWire default sink volume onto QMK keyboards
"""

from .audio import EventAdapter, EventBus, VolumeAggregator
from .handoff import LatestValue
from .models import NodeVolume, VolumeInfo

__version__ = "0.1.0"

__all__ = [
    "EventAdapter",
    "EventBus",
    "VolumeAggregator",
    "LatestValue",
    "NodeVolume",
    "VolumeInfo",
]
