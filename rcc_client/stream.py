# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Bounded, closable stream of change events."""

import collections
import threading
import time
from typing import Iterator

from .exceptions import StreamClosed
from .models import ChangeEvent

DEFAULT_MAXSIZE = 32

# Upper bound on a single wait while put() watches for cancellation
_CANCEL_CHECK_SECONDS = 0.05


class ChangeStream:
    """FIFO of ChangeEvent with a fixed capacity and explicit closure.

    End-of-stream is signalled by close(), never by a marker event. Events
    queued before closure stay readable; get() raises StreamClosed once the
    stream is closed and drained, and iteration simply ends.
    """

    def __init__(self, maxsize: int = DEFAULT_MAXSIZE):
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self._events: collections.deque[ChangeEvent] = collections.deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        with self._cond:
            return len(self._events)

    def put(self, event: ChangeEvent, cancelled: threading.Event | None = None) -> bool:
        """Queue an event, waiting for room while the stream is full.

        Args:
            event: Event to deliver
            cancelled: When set before the event could be queued, the stream
                is closed instead

        Returns:
            True if the event was queued, False if the stream was closed
        """
        with self._cond:
            while True:
                if self._closed:
                    return False
                if cancelled is not None and cancelled.is_set():
                    self._close_locked()
                    return False
                if len(self._events) < self.maxsize:
                    self._events.append(event)
                    self._cond.notify_all()
                    return True
                self._cond.wait(_CANCEL_CHECK_SECONDS if cancelled is not None else None)

    def get(self, timeout: float | None = None) -> ChangeEvent:
        """Take the next event.

        Args:
            timeout: Seconds to wait; None waits until an event or closure

        Raises:
            StreamClosed: If the stream is closed and no events remain
            TimeoutError: If no event arrived within timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while not self._events:
                if self._closed:
                    raise StreamClosed("Change stream is closed")
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError("No change event within timeout")
                self._cond.wait(remaining)
            event = self._events.popleft()
            self._cond.notify_all()
            return event

    def close(self) -> None:
        with self._cond:
            self._close_locked()

    def _close_locked(self) -> None:
        self._closed = True
        self._cond.notify_all()

    def __iter__(self) -> Iterator[ChangeEvent]:
        while True:
            try:
                yield self.get()
            except StreamClosed:
                return
