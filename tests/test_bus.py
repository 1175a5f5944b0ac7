"""Tests for the pw-dump stream decoding and the event bus."""

import json
from unittest.mock import MagicMock

from qmk_volume.audio.bus import EventBus
from qmk_volume.audio.dump import (
    DumpDecoder,
    GlobalObject,
    MetadataProperty,
    ObjectKind,
    props_from_obj,
)

from .helpers import metadata_object, node_object, removed


class TestDumpDecoder:
    def test_array_of_objects(self):
        text = json.dumps([node_object(57), metadata_object(40)], indent=2)
        objects = list(DumpDecoder().feed(text))
        assert [o["id"] for o in objects] == [57, 40]

    def test_split_across_reads(self):
        text = json.dumps([node_object(57)], indent=2) + "\n" + json.dumps([removed(57)])
        decoder = DumpDecoder()
        first = list(decoder.feed(text[:50]))
        rest = list(decoder.feed(text[50:]))
        assert first == []
        assert [o["id"] for o in rest] == [57, 57]

    def test_garbage_is_discarded(self, log_messages):
        decoder = DumpDecoder()
        assert list(decoder.feed("this is not json\n")) == []
        assert any(level == "ERROR" for level, _ in log_messages)
        assert [o["id"] for o in decoder.feed(json.dumps([removed(3)]))] == [3]

    def test_entries_without_id_are_skipped(self):
        assert list(DumpDecoder().feed('[{"type": "x"}, 5]')) == []


def test_props_are_merged_and_stringified():
    obj = {"props": {"object.serial": 12}, "info": {"props": {"device.id": 42, "node.name": "x"}}}
    assert props_from_obj(obj) == {"object.serial": "12", "device.id": "42", "node.name": "x"}


class TestEventBus:
    def test_global_announced_once(self):
        bus = EventBus()
        listener = MagicMock()
        bus.add_global_listener(listener)
        bus.dispatch(node_object(57))
        bus.dispatch(node_object(57, volume=0.5, mute=False))
        listener.assert_called_once()
        announced = listener.call_args[0][0]
        assert isinstance(announced, GlobalObject)
        assert announced.id == 57
        assert announced.kind == ObjectKind.NODE
        assert announced.props["node.name"] == "alsa_output.usb"

    def test_params_reach_listeners_registered_during_announcement(self):
        bus = EventBus()
        params = []
        bus.add_global_listener(lambda obj: bus.add_param_listener(obj.id, params.append))
        bus.dispatch(node_object(57, volume=0.5, mute=False))
        assert params == [{"channelVolumes": [0.5, 0.5], "mute": False}]

    def test_metadata_values_are_text(self):
        bus = EventBus()
        props = []
        bus.add_property_listener(40, props.append)
        bus.dispatch(metadata_object(40, sink="alsa_output.usb"))
        assert props == [
            MetadataProperty(
                subject=0,
                key="default.audio.sink",
                type="Spa:String:JSON",
                value='{"name": "alsa_output.usb"}',
            )
        ]

    def test_removal_fires_and_drops_listeners(self):
        bus = EventBus()
        on_removed = MagicMock()
        bus.add_removed_listener(57, on_removed)
        bus.add_param_listener(57, MagicMock())
        bus.dispatch(node_object(57))
        bus.dispatch(removed(57))
        on_removed.assert_called_once_with()
        assert bus.listener_count(57) == 0

    def test_id_reuse_is_announced_again(self):
        bus = EventBus()
        listener = MagicMock()
        bus.add_global_listener(listener)
        bus.dispatch(node_object(57))
        bus.dispatch(removed(57))
        bus.dispatch(node_object(57, name="other"))
        assert listener.call_count == 2

    def test_registration_remove(self):
        bus = EventBus()
        listener = MagicMock()
        registration = bus.add_param_listener(57, listener)
        registration.remove()
        registration.remove()
        bus.dispatch(node_object(57, volume=0.5, mute=False))
        listener.assert_not_called()
