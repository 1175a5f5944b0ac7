"""
Translates PipeWire events into volume aggregator updates
"""

import json
import math
import weakref
from typing import Any, Dict, Optional, Tuple

from loguru import logger

from ..errors import MalformedEventError
from .aggregator import MetadataSubscription, NodeSubscription, VolumeAggregator
from .bus import EventBus, Registration
from .dump import GlobalObject, MetadataProperty, ObjectKind

DEFAULT_METADATA_NAME = "default"
DEFAULT_SINK_KEY = "default.audio.sink"
JSON_TYPE = "Spa:String:JSON"


def parse_default_sink(value: str) -> str:
    """Extract the sink name from a default.audio.sink value like {"name": "..."}"""
    try:
        data = json.loads(value)
    except (TypeError, ValueError) as e:
        raise MalformedEventError(f"failed to parse default audio sink json data: {e}") from e
    if not isinstance(data, dict):
        raise MalformedEventError("default audio sink data is not a json object")
    if "name" not in data:
        raise MalformedEventError("default audio sink object does not contain name")
    name = data["name"]
    if not isinstance(name, str):
        raise MalformedEventError("default audio sink name is not a string")
    return name


def parse_node_params(param: Dict[str, Any]) -> Tuple[Optional[float], Optional[bool]]:
    """Extract (volume, muted) from a Props parameter, None for missing fields

    The volume is the first entry of channelVolumes.
    """
    volume = None
    muted = None

    if "channelVolumes" in param:
        volumes = param["channelVolumes"]
        if (
            isinstance(volumes, list)
            and volumes
            and isinstance(volumes[0], (int, float))
            and not isinstance(volumes[0], bool)
        ):
            if math.isfinite(volumes[0]):
                volume = float(volumes[0])
            else:
                logger.error(f"channel volume is not finite: {volumes[0]}")
        else:
            logger.error("channel volumes are not a float array")

    if "mute" in param:
        if isinstance(param["mute"], bool):
            muted = param["mute"]
        else:
            logger.error("channel mute is not a bool")

    return volume, muted


class EventAdapter:
    """Subscribes to the objects that matter for the default sink volume

    Every callback handed to the bus only holds a weak reference to the
    aggregator, so dropping the aggregator silences them.
    """

    def __init__(self, bus: EventBus, aggregator: VolumeAggregator):
        self.bus = bus
        self._aggregator = weakref.ref(aggregator)
        self._registration: Optional[Registration] = None

    def attach(self) -> None:
        if self._registration is None:
            self._registration = self.bus.add_global_listener(self.on_global)

    def detach(self) -> None:
        if self._registration is not None:
            self._registration.remove()
            self._registration = None

    def on_global(self, obj: GlobalObject) -> None:
        aggregator = self._aggregator()
        if aggregator is None:
            return

        if obj.kind == ObjectKind.METADATA:
            if obj.props.get("metadata.name") == DEFAULT_METADATA_NAME:
                self._track_metadata(aggregator, obj)
        elif obj.kind == ObjectKind.NODE:
            name = obj.props.get("node.name")
            if "device.id" in obj.props and name:
                self._track_node(aggregator, obj, name)

    def _track_metadata(self, aggregator: VolumeAggregator, obj: GlobalObject) -> None:
        aggregator_ref = self._aggregator
        object_id = obj.id

        def on_property(prop: MetadataProperty) -> None:
            if prop.key != DEFAULT_SINK_KEY or prop.type != JSON_TYPE or prop.value is None:
                return
            try:
                name = parse_default_sink(prop.value)
            except MalformedEventError as e:
                logger.error(f"Ignoring default sink update from metadata {object_id}: {e}")
                return
            target = aggregator_ref()
            if target is not None:
                target.set_default_sink(name)

        subscription = MetadataSubscription(
            registrations=[
                self.bus.add_property_listener(object_id, on_property),
                self.bus.add_removed_listener(object_id, self._removal_callback(object_id)),
            ]
        )
        aggregator.track_subscription(object_id, subscription)
        logger.debug(f"Tracking default metadata {object_id}")

    def _track_node(self, aggregator: VolumeAggregator, obj: GlobalObject, name: str) -> None:
        aggregator_ref = self._aggregator
        node_id = obj.id

        def on_param(param: Dict[str, Any]) -> None:
            volume, muted = parse_node_params(param)
            if volume is None and muted is None:
                return
            if volume is None:
                logger.warning(f"no channel volumes for node {node_id}")
            if muted is None:
                logger.warning(f"no muted status for node {node_id}")
            target = aggregator_ref()
            if target is not None:
                target.set_volume_for_node(name, volume=volume, muted=muted)

        subscription = NodeSubscription(
            name=name,
            registrations=[
                self.bus.add_param_listener(node_id, on_param),
                self.bus.add_removed_listener(node_id, self._removal_callback(node_id)),
            ],
        )
        aggregator.track_subscription(node_id, subscription)
        logger.debug(f"Tracking node {node_id} ({name})")

    def _removal_callback(self, object_id: int):
        aggregator_ref = self._aggregator

        def on_removed() -> None:
            aggregator = aggregator_ref()
            if aggregator is None:
                return
            subscription = aggregator.untrack(object_id)
            if isinstance(subscription, NodeSubscription):
                aggregator.remove_node(subscription.name)

        return on_removed
