"""Builders for pw-dump objects and fake HID devices."""

from unittest.mock import MagicMock


def make_device(response=None, written=33, name="Keychron V3 Max"):
    """MagicMock standing in for an open hid.device."""
    device = MagicMock()
    device.write.return_value = written
    device.read.return_value = [0x01] + [0x00] * 31 if response is None else response
    device.get_product_string.return_value = name
    return device


def metadata_object(object_id=40, sink=None, name="default"):
    """pw-dump style metadata object."""
    obj = {
        "id": object_id,
        "type": "PipeWire:Interface:Metadata",
        "props": {"metadata.name": name},
    }
    if sink is not None:
        obj["metadata"] = [
            {
                "subject": 0,
                "key": "default.audio.sink",
                "type": "Spa:String:JSON",
                "value": {"name": sink},
            }
        ]
    return obj


def node_object(object_id=57, name="alsa_output.usb", volume=None, mute=None, device_id=42):
    """pw-dump style node object, with a Props param when volume or mute is given."""
    props = {"node.name": name, "media.class": "Audio/Sink"}
    if device_id is not None:
        props["device.id"] = device_id
    info = {"props": props, "params": {}}
    param = {}
    if volume is not None:
        param["channelVolumes"] = [volume, volume]
    if mute is not None:
        param["mute"] = mute
    if param:
        info["params"]["Props"] = [param]
    return {"id": object_id, "type": "PipeWire:Interface:Node", "info": info}


def removed(object_id):
    return {"id": object_id, "info": None}
