"""
Raw HID command protocol understood by the keyboard firmware

Every command is a 33 byte report:

    byte 0   report id, always 0x00
    byte 1   protocol marker 'A'
    byte 2   opcode
    byte 3.. opcode arguments, zero padded to the report length

The firmware answers with a 32 byte report whose first byte is 0x01 on success.
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence, Union

from ..errors import DeviceTransportError, InvalidVolumeError, UnsuccessfulResponseError

REPORT_LENGTH = 32
PACKET_LENGTH = REPORT_LENGTH + 1
RESPONSE_LENGTH = REPORT_LENGTH

REPORT_ID = 0x00
PROTOCOL_ID = ord("A")
RESPONSE_SUCCESS = 0x01

MAX_LEVEL = 100


class Opcode(IntEnum):
    SET_VOLUME = 0x01


@dataclass(frozen=True)
class SetVolume:
    """Show a volume level (0-100) and mute state on the display"""

    level: int
    muted: bool

    opcode = Opcode.SET_VOLUME


Command = SetVolume


def volume_to_level(volume: float) -> int:
    """Map a linear volume fraction onto the 0-100 display range

    The fourth root compresses the range so the steps look even to the ear.
    Fractions above 1.0 (over-amplified sinks) show as 100.
    """
    volume = min(max(volume, 0.0), 1.0)
    # round half up
    return math.floor(volume ** 0.25 * 100 + 0.5)


def encode(command: Command) -> bytes:
    """Encode a command into a full report"""
    if not 0 <= command.level <= MAX_LEVEL:
        raise InvalidVolumeError(command.level)

    packet = bytearray(PACKET_LENGTH)
    packet[0] = REPORT_ID
    packet[1] = PROTOCOL_ID
    packet[2] = command.opcode
    packet[3] = command.level
    packet[4] = 1 if command.muted else 0
    return bytes(packet)


def decode(packet: Union[bytes, Sequence[int]]) -> Command:
    """Decode a report produced by encode()"""
    packet = bytes(packet)
    if len(packet) != PACKET_LENGTH:
        raise ValueError(f"Expected {PACKET_LENGTH} bytes, got {len(packet)}")
    if packet[1] != PROTOCOL_ID:
        raise ValueError(f"Unknown protocol marker {packet[1]:#04x}")
    if packet[2] != Opcode.SET_VOLUME:
        raise ValueError(f"Unknown opcode {packet[2]:#04x}")
    return SetVolume(level=packet[3], muted=bool(packet[4]))


def check_response(response: Union[bytes, Sequence[int]]) -> None:
    """Raise if the device did not acknowledge the last command"""
    if not response:
        raise DeviceTransportError("Device returned an empty response")
    status = response[0]
    if status != RESPONSE_SUCCESS:
        raise UnsuccessfulResponseError(status)
