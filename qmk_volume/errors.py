"""
Errors raised between the audio side and the display devices
"""


class VolumeError(Exception):
    """Base class for failures while showing a volume"""


class InvalidVolumeError(VolumeError, ValueError):
    """Volume level outside of 0-100, never sent to a device"""

    def __init__(self, level: int):
        super().__init__(f"Volume has to be between 0 and 100, got {level}")
        self.level = level


class DeviceTransportError(VolumeError):
    """Writing to or reading from a device failed"""


class UnsuccessfulResponseError(VolumeError):
    """Device answered, but did not confirm the command"""

    def __init__(self, status: int):
        super().__init__(f"Keyboard failed to indicate volume (status {status:#04x})")
        self.status = status


class MalformedEventError(ValueError):
    """Audio event payload does not have the expected shape"""
