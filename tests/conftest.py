"""Shared fixtures for QMK Volume Sync tests."""

import pytest
from loguru import logger

from qmk_volume.audio import EventAdapter, EventBus, VolumeAggregator

from .helpers import make_device


@pytest.fixture
def emitted():
    """List collecting every value the aggregator reports."""
    return []


@pytest.fixture
def aggregator(emitted):
    return VolumeAggregator(emitted.append)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def adapter(bus, aggregator):
    adapter = EventAdapter(bus, aggregator)
    adapter.attach()
    return adapter


@pytest.fixture
def log_messages():
    """Capture loguru output as (level, message) tuples."""
    messages = []
    handler_id = logger.add(
        lambda message: messages.append(
            (message.record["level"].name, message.record["message"])
        ),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def device():
    return make_device()
