"""
Display device discovery and command delivery over raw HID
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import hid
from loguru import logger

from ..errors import DeviceTransportError, VolumeError
from .protocol import RESPONSE_LENGTH, SetVolume, check_response, encode

# Raw HID interface exposed by QMK/VIA keyboards
USAGE_PAGE = 0xFF60
USAGE = 0x61

DEFAULT_PACING = 0.05


@dataclass(frozen=True)
class DeviceFilter:
    """Which HID devices to talk to"""

    vendor_id: Optional[int] = None
    product_id: Optional[int] = None

    @classmethod
    def none(cls) -> "DeviceFilter":
        return cls()

    @classmethod
    def vendor(cls, vendor_id: int) -> "DeviceFilter":
        return cls(vendor_id=vendor_id)

    @classmethod
    def product(cls, vendor_id: int, product_id: int) -> "DeviceFilter":
        return cls(vendor_id=vendor_id, product_id=product_id)

    def matches(self, info: Dict) -> bool:
        if info.get("usage_page") != USAGE_PAGE or info.get("usage") != USAGE:
            return False
        if self.vendor_id is not None and info.get("vendor_id") != self.vendor_id:
            return False
        if self.product_id is not None and info.get("product_id") != self.product_id:
            return False
        return True

    def __str__(self) -> str:
        if self.vendor_id is None:
            return "any device"
        if self.product_id is None:
            return f"vendor {self.vendor_id:04x}"
        return f"device {self.vendor_id:04x}:{self.product_id:04x}"


def find_devices(device_filter: DeviceFilter) -> List[Dict]:
    """List the HID interfaces matching the filter"""
    return [info for info in hid.enumerate() if device_filter.matches(info)]


def open_devices(device_filter: DeviceFilter) -> List["hid.device"]:
    """Open every matching HID interface"""
    devices = []
    for info in find_devices(device_filter):
        device = hid.device()
        try:
            device.open_path(info["path"])
        except OSError as e:
            raise DeviceTransportError(f"Failed to open {info['path']!r}: {e}") from e
        logger.info(
            f"Opened {info.get('product_string') or 'display'} "
            f"({info['vendor_id']:04x}:{info['product_id']:04x}) at {info['path']!r}"
        )
        devices.append(device)
    return devices


def device_name(device) -> str:
    try:
        return device.get_product_string() or "unknown device"
    except (OSError, ValueError):
        return "unknown device"


class DeviceWriter:
    """Sends commands to a fixed set of open display devices"""

    def __init__(
        self,
        devices: List,
        pacing: float = DEFAULT_PACING,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.devices = devices
        # Firmware needs time to process a report before the next device is driven
        self.pacing = pacing
        self._sleep = sleep

    def send(self, device, packet: bytes) -> None:
        """Write one report and wait for the acknowledgement"""
        name = device_name(device)
        logger.debug(f"Sending {list(packet)} to {name}")
        try:
            written = device.write(packet)
        except OSError as e:
            raise DeviceTransportError(f"Failed to write to {name}: {e}") from e
        if written is not None and written < 0:
            raise DeviceTransportError(f"Failed to write to {name}")

        try:
            response = device.read(RESPONSE_LENGTH)
        except OSError as e:
            raise DeviceTransportError(f"Failed to read from {name}: {e}") from e
        logger.debug(f"Received {list(response)} from {name}")

        if response and len(response) < RESPONSE_LENGTH:
            raise DeviceTransportError(
                f"Short response from {name}: {len(response)} of {RESPONSE_LENGTH} bytes"
            )
        check_response(response)

    def show_volume(self, level: int, muted: bool) -> List[Tuple[object, VolumeError]]:
        """Show the volume on every device

        Raises InvalidVolumeError before touching any device. Device failures
        are logged and returned as (device, error) pairs.
        """
        packet = encode(SetVolume(level=level, muted=muted))

        failures = []
        for device in self.devices:
            try:
                self.send(device, packet)
            except VolumeError as e:
                logger.error(f"Failed to show volume on {device_name(device)}: {e}")
                failures.append((device, e))
            self._sleep(self.pacing)
        return failures

