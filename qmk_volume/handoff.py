"""
Single slot mailbox between the audio loop and the device thread
"""

import threading
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

_EMPTY = object()


class LatestValue(Generic[T]):
    """Holds at most one pending value, newer values replace older ones

    put() never blocks. take() waits for a value and leaves the slot empty.
    Values overwritten before they were taken are lost.
    """

    def __init__(self):
        self._condition = threading.Condition()
        self._value = _EMPTY

    def put(self, value: T) -> None:
        with self._condition:
            self._value = value
            self._condition.notify()

    def take(self, timeout: Optional[float] = None) -> T:
        with self._condition:
            if not self._condition.wait_for(self.pending, timeout=timeout):
                raise TimeoutError("No value arrived")
            value, self._value = self._value, _EMPTY
            return value

    def pending(self) -> bool:
        return self._value is not _EMPTY
