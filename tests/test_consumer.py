"""Tests for the device thread."""

import time
from unittest.mock import MagicMock

from qmk_volume.consumer import ConsumerLoop
from qmk_volume.device import DeviceWriter
from qmk_volume.errors import InvalidVolumeError
from qmk_volume.handoff import LatestValue
from qmk_volume.models import VolumeInfo

from .helpers import make_device


def test_process_scales_volume():
    writer = MagicMock()
    writer.show_volume.return_value = []
    assert ConsumerLoop(LatestValue(), writer).process(VolumeInfo(volume=0.0625, muted=True))
    writer.show_volume.assert_called_once_with(50, True)


def test_process_skips_unknown_volume():
    writer = MagicMock()
    assert not ConsumerLoop(LatestValue(), writer).process(None)
    writer.show_volume.assert_not_called()


def test_device_failure_reported():
    device = make_device(response=[0x00] * 32)
    writer = DeviceWriter([device], sleep=lambda s: None)
    assert not ConsumerLoop(LatestValue(), writer).process(VolumeInfo(volume=1.0, muted=False))


def test_invalid_level_is_logged(log_messages):
    writer = MagicMock()
    writer.show_volume.side_effect = InvalidVolumeError(101)
    assert not ConsumerLoop(LatestValue(), writer).process(VolumeInfo(volume=1.0, muted=False))
    assert any(level == "ERROR" for level, _ in log_messages)


def test_thread_shows_latest_value():
    device = make_device()
    writer = DeviceWriter([device], sleep=lambda s: None)
    handoff = LatestValue()
    loop = ConsumerLoop(handoff, writer)
    handoff.put(VolumeInfo(volume=0.0625, muted=False))
    loop.start()

    loop.thread.join(timeout=0.5)
    assert loop.thread.daemon
    device.write.assert_called_once()
    assert list(device.write.call_args[0][0][:5]) == [0x00, 0x41, 0x01, 50, 0]


def test_thread_survives_unexpected_error(log_messages):
    writer = MagicMock()
    writer.show_volume.side_effect = [RuntimeError("device gone"), []]
    handoff = LatestValue()
    loop = ConsumerLoop(handoff, writer)
    handoff.put(VolumeInfo(volume=1.0, muted=False))
    loop.start()

    deadline = time.monotonic() + 2
    while writer.show_volume.call_count < 1 and time.monotonic() < deadline:
        time.sleep(0.01)
    handoff.put(VolumeInfo(volume=0.0625, muted=True))
    while writer.show_volume.call_count < 2 and time.monotonic() < deadline:
        time.sleep(0.01)

    assert loop.thread.is_alive()
    writer.show_volume.assert_called_with(50, True)
    assert any(level == "ERROR" and "Error showing volume" in message for level, message in log_messages)
