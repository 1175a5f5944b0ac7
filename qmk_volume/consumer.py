"""
Device thread: shows the latest effective volume on the keyboards
"""

import threading
from typing import Optional

from loguru import logger

from .device import DeviceWriter, volume_to_level
from .errors import InvalidVolumeError
from .handoff import LatestValue
from .models import VolumeInfo


class ConsumerLoop:
    def __init__(self, handoff: LatestValue[Optional[VolumeInfo]], writer: DeviceWriter):
        self.handoff = handoff
        self.writer = writer
        self.thread = None

    def process(self, value: Optional[VolumeInfo]) -> bool:
        """Show one value, returns True when every device confirmed it"""
        if value is None:
            logger.debug("No default sink volume known, nothing to show")
            return False

        level = volume_to_level(value.volume)
        logger.debug(f"Showing volume {value.volume:.3f} as level {level} (muted: {value.muted})")
        try:
            failures = self.writer.show_volume(level, value.muted)
        except InvalidVolumeError as e:
            logger.error(f"Not sending volume: {e}")
            return False
        return not failures

    def run(self) -> None:
        logger.info("Starting device loop")
        while True:
            value = self.handoff.take()
            try:
                self.process(value)
            except Exception:
                logger.exception(f"Error showing volume {value}")

    def start(self) -> None:
        """Run the loop in a daemon thread, it ends with the process"""
        if self.thread and self.thread.is_alive():
            logger.warning("Device loop already running")
            return

        self.thread = threading.Thread(target=self.run, name="device-writer", daemon=True)
        self.thread.start()
