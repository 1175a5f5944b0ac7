"""
In-process PipeWire event bus fed by dumped registry objects
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Set

from loguru import logger

from .dump import (
    GlobalObject,
    MetadataProperty,
    ObjectKind,
    is_removal,
    metadata_properties,
    node_params,
    object_kind,
    props_from_obj,
)

GLOBAL = "global"
PARAM = "param"
PROPERTY = "property"
REMOVED = "removed"


class Registration:
    """Handle of one registered listener, remove() unregisters it"""

    def __init__(self, listeners: List[Callable], callback: Callable):
        self._listeners = listeners
        self._callback = callback

    def remove(self) -> None:
        try:
            self._listeners.remove(self._callback)
        except ValueError:
            pass


class EventBus:
    """Dispatches topology, metadata, parameter and removal events

    Listeners run synchronously on the thread calling dispatch().
    """

    def __init__(self):
        self._known: Set[int] = set()
        self._global_listeners: List[Callable[[GlobalObject], None]] = []
        self._listeners: Dict[int, Dict[str, List[Callable]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def add_global_listener(self, callback: Callable[[GlobalObject], None]) -> Registration:
        self._global_listeners.append(callback)
        return Registration(self._global_listeners, callback)

    def add_param_listener(
        self, object_id: int, callback: Callable[[Dict[str, Any]], None]
    ) -> Registration:
        return self._add(object_id, PARAM, callback)

    def add_property_listener(
        self, object_id: int, callback: Callable[[MetadataProperty], None]
    ) -> Registration:
        return self._add(object_id, PROPERTY, callback)

    def add_removed_listener(self, object_id: int, callback: Callable[[], None]) -> Registration:
        return self._add(object_id, REMOVED, callback)

    def _add(self, object_id: int, event: str, callback: Callable) -> Registration:
        listeners = self._listeners[object_id][event]
        listeners.append(callback)
        return Registration(listeners, callback)

    def listener_count(self, object_id: int) -> int:
        """Number of listeners still registered for an object"""
        if object_id not in self._listeners:
            return 0
        return sum(len(v) for v in self._listeners[object_id].values())

    def dispatch(self, obj: Dict[str, Any]) -> None:
        """Handle one object from the dump stream"""
        try:
            object_id = int(obj["id"])
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Ignoring object without id: {obj!r}")
            return

        if is_removal(obj):
            self._remove(object_id)
            return

        if object_id not in self._known:
            self._known.add(object_id)
            global_object = GlobalObject(
                id=object_id, kind=object_kind(obj), props=props_from_obj(obj)
            )
            for callback in list(self._global_listeners):
                callback(global_object)

        listeners = self._listeners.get(object_id)
        if not listeners:
            return

        for param in node_params(obj):
            for callback in list(listeners[PARAM]):
                callback(param)

        for prop in metadata_properties(obj):
            for callback in list(listeners[PROPERTY]):
                callback(prop)

    def _remove(self, object_id: int) -> None:
        self._known.discard(object_id)
        listeners = self._listeners.pop(object_id, None)
        if not listeners:
            return
        for callback in list(listeners[REMOVED]):
            callback()
        listeners.clear()
