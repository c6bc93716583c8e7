"""Connection running flag observed by the receive loop.

The connection layer owns and flips the flag; the connector only reads it,
once before and once after each blocking SQS receive call.
"""

import threading
from typing import Protocol


class RunningFlag(Protocol):
    def is_running(self) -> bool: ...


class ConnectionState:
    """Thread-safe running flag. Starts stopped."""

    def __init__(self, running: bool = False) -> None:
        self._running = threading.Event()
        if running:
            self._running.set()

    def start(self) -> None:
        self._running.set()

    def stop(self) -> None:
        self._running.clear()

    def is_running(self) -> bool:
        return self._running.is_set()
