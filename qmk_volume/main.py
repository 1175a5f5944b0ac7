"""
Main entry point for QMK Volume Sync
"""

import argparse
import os
import sys
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from .audio import EventAdapter, EventBus, VolumeAggregator
from .config import Settings, load_settings
from .consumer import ConsumerLoop
from .device import DeviceWriter, open_devices
from .errors import DeviceTransportError
from .handoff import LatestValue
from .models import VolumeInfo


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Setup logging configuration"""
    if log_file is None:
        log_dir = os.path.expanduser("~/.local/log/qmk-volume-sync")
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, "qmk-volume-sync.log")
    logger.remove()
    logger.add(log_file, level=level, rotation="10 MB", retention="7 days")
    logger.add(sys.stderr, level=level)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="qmk-volume-sync",
        description="Show the PipeWire output volume on QMK keyboards",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return parser.parse_args(argv)


def run(settings: Settings) -> int:
    """Wire the audio loop to the device thread and run until terminated"""
    try:
        devices = open_devices(settings.device_filter())
    except DeviceTransportError as e:
        logger.error(f"Failed to open keyboard: {e}")
        return 1
    if not devices:
        logger.error(f"No keyboard found for {settings.device_filter()}")
        return 1

    from .audio.monitor import PipeWireMonitor

    writer = DeviceWriter(devices, pacing=settings.pacing)
    handoff: LatestValue[Optional[VolumeInfo]] = LatestValue()
    ConsumerLoop(handoff, writer).start()

    bus = EventBus()
    aggregator = VolumeAggregator(handoff.put)
    adapter = EventAdapter(bus, aggregator)
    adapter.attach()

    try:
        PipeWireMonitor(bus, settings.pw_dump).run()
    finally:
        adapter.detach()
    # the device thread may be stuck in a read, it is left to die with the process
    return 0


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    try:
        settings = load_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    level = settings.log_level
    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "WARNING"
    setup_logging(level, settings.log_file)

    logger.info("Starting QMK Volume Sync")
    try:
        return run(settings)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
