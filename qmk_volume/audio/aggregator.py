"""
Volume aggregation for the default output device
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from loguru import logger

from ..models import NodeVolume, VolumeInfo
from .bus import Registration


@dataclass
class MetadataSubscription:
    """Listeners on the "default" metadata object"""

    registrations: List[Registration] = field(default_factory=list)


@dataclass
class NodeSubscription:
    """Listeners on a volume carrying node, remembers the node name for cleanup"""

    name: str
    registrations: List[Registration] = field(default_factory=list)


Subscription = Union[MetadataSubscription, NodeSubscription]


class VolumeAggregator:
    """Tracks node volumes and reports the default sink volume when it changes

    All methods run on the audio loop, the listener is called synchronously
    and must not block.
    """

    def __init__(self, listener: Callable[[Optional[VolumeInfo]], None]):
        self._listener = listener
        self.default_sink: Optional[str] = None
        self.volume: Optional[VolumeInfo] = None
        self.nodes: Dict[str, NodeVolume] = {}
        self.subscriptions: Dict[int, Subscription] = {}

    def set_default_sink(self, name: str) -> None:
        if name == self.default_sink:
            return
        logger.info(f"Default sink is now {name}")
        self.default_sink = name
        self._check_default_sink()

    def set_volume_for_node(
        self, name: str, volume: Optional[float] = None, muted: Optional[bool] = None
    ) -> None:
        """Store volume facts for a node, missing fields keep their last value"""
        current = self.nodes.get(name)
        if current is None:
            if volume is None or muted is None:
                logger.warning(f"Incomplete first volume update for node {name}, skipping")
                return
            self.nodes[name] = NodeVolume(name=name, volume=volume, muted=muted)
        else:
            self.nodes[name] = current.merged(volume=volume, muted=muted)

        if name == self.default_sink:
            self._check_default_sink()

    def remove_node(self, name: str) -> None:
        if self.nodes.pop(name, None) is None:
            return
        logger.debug(f"Node {name} removed")
        if name == self.default_sink:
            self._check_default_sink()

    def track_subscription(self, object_id: int, subscription: Subscription) -> None:
        previous = self.subscriptions.pop(object_id, None)
        if previous is not None:
            _cancel(previous)
        self.subscriptions[object_id] = subscription

    def untrack(self, object_id: int) -> Optional[Subscription]:
        """Drop the listeners of a removed object and return its subscription"""
        subscription = self.subscriptions.pop(object_id, None)
        if subscription is not None:
            _cancel(subscription)
        return subscription

    def _check_default_sink(self) -> None:
        node = self.nodes.get(self.default_sink) if self.default_sink else None
        new_volume = node.info() if node else None
        if new_volume != self.volume:
            logger.debug(f"Effective volume changed: {new_volume}")
            self.volume = new_volume
            self._listener(new_volume)


def _cancel(subscription: Subscription) -> None:
    for registration in subscription.registrations:
        registration.remove()
    subscription.registrations.clear()
