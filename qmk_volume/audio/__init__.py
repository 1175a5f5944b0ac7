from .aggregator import VolumeAggregator, MetadataSubscription, NodeSubscription
from .bus import EventBus, Registration
from .events import EventAdapter

__all__ = [
    "VolumeAggregator",
    "MetadataSubscription",
    "NodeSubscription",
    "EventBus",
    "Registration",
    "EventAdapter",
]
