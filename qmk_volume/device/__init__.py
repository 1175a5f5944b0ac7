from .protocol import SetVolume, encode, decode, check_response, volume_to_level
from .writer import DeviceFilter, DeviceWriter, find_devices, open_devices

__all__ = [
    "SetVolume",
    "encode",
    "decode",
    "check_response",
    "volume_to_level",
    "DeviceFilter",
    "DeviceWriter",
    "find_devices",
    "open_devices",
]
