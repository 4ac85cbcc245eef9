"""Bounded alert stream with block-never-drop backpressure.

Workers publish alerts as soon as a package finishes evaluating; a consumer
(a notifier, a CI log printer) drains the stream concurrently. The buffer is
fixed-capacity and a full buffer blocks producers rather than discarding
alerts. The only escape hatch is a timeout-bounded ``publish`` used on
cancellation paths, which raises instead of dropping silently.

Usage::

    stream = AlertStream(capacity=100)
    threading.Thread(target=lambda: [notify(a) for a in stream]).start()
    orchestrator = ScanOrchestrator(store, stream=stream)
    orchestrator.run(path)
    stream.close()
"""

from __future__ import annotations

import queue
import threading
from typing import Iterator

from chainguardian.core.alerts.models import Alert

DEFAULT_CAPACITY: int = 100

_CLOSED = object()


class AlertStreamTimeout(queue.Full):
    """Raised when a timeout-bounded publish could not enqueue its alert."""


class AlertStream:
    """Fixed-capacity, thread-safe alert queue.

    Args:
        capacity: Maximum number of buffered alerts. Must be positive.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError(f"Alert stream capacity must be positive, got {capacity}")
        self._queue: queue.Queue[object] = queue.Queue(maxsize=capacity)
        self._capacity = capacity
        self._closed = threading.Event()
        self._published = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def published(self) -> int:
        """Total number of alerts accepted so far."""
        with self._lock:
            return self._published

    def publish(self, alert: Alert, timeout: float | None = None) -> None:
        """Enqueue an alert, blocking while the buffer is full.

        Args:
            alert: The alert to publish.
            timeout: ``None`` blocks indefinitely. A number bounds the wait;
                reserved for cancellation paths.

        Raises:
            AlertStreamTimeout: If ``timeout`` elapsed with the buffer full.
            RuntimeError: If the stream has been closed.
        """
        if self.closed:
            raise RuntimeError("Cannot publish to a closed alert stream")
        try:
            self._queue.put(alert, block=True, timeout=timeout)
        except queue.Full:
            raise AlertStreamTimeout(
                f"Alert stream full for {timeout}s; alert for "
                f"{alert.package.label} not delivered"
            ) from None
        with self._lock:
            self._published += 1

    def get(self, timeout: float | None = None) -> Alert | None:
        """Take the next alert; ``None`` once the stream is closed and drained.

        Raises:
            queue.Empty: If ``timeout`` elapsed with nothing available.
        """
        item = self._queue.get(block=True, timeout=timeout)
        if item is _CLOSED:
            # Re-post the sentinel so other consumers also terminate.
            self._queue.put(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Stop accepting alerts. Blocks until the end marker fits in the buffer."""
        if self.closed:
            return
        self._closed.set()
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[Alert]:
        while True:
            alert = self.get()
            if alert is None:
                return
            yield alert

    def drain(self) -> list[Alert]:
        """Return every alert currently buffered without blocking."""
        drained: list[Alert] = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return drained
            if item is _CLOSED:
                self._queue.put(_CLOSED)
                return drained
            drained.append(item)  # type: ignore[arg-type]
