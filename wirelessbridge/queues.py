"""Thread-safe queues: blocking with timeout, non-blocking, and future-based."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterable
from concurrent.futures import Future
from typing import Generic, TypeVar

from . import slog

T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 100


class BlockingQueue(Generic[T]):
    """FIFO queue whose pop waits up to a timeout for an element."""

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        self._items: deque[T] = deque()
        self._cond = threading.Condition()
        self._timeout = timeout_ms / 1000.0
        slog.print_debug("BlockingQueue/%s:  BlockingQueue created ...", "__init__")

    def push(self, item: T) -> None:
        """Append an item and wake one waiting consumer."""
        with self._cond:
            self._items.append(item)
            self._cond.notify()

    def pop(self) -> T | None:
        """Remove and return the oldest item, or None if the timeout expires."""
        with self._cond:
            self._cond.wait_for(lambda: bool(self._items), timeout=self._timeout)
            if self._items:
                return self._items.popleft()
            return None

    def __len__(self) -> int:
        return len(self._items)


class ThreadQueue(Generic[T]):
    """Lock-protected FIFO queue whose pop never blocks."""

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._lock = threading.Lock()
        self._items: deque[T] = deque(items or ())

    def push(self, item: T) -> None:
        """Append an item."""
        with self._lock:
            self._items.append(item)

    def pop(self) -> T | None:
        """Remove and return the oldest item, or None when empty."""
        with self._lock:
            if self._items:
                return self._items.popleft()
            return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def copy(self) -> ThreadQueue[T]:
        """Return an independent queue holding the same items."""
        with self._lock:
            return ThreadQueue(list(self._items))


class UniQueue(Generic[T]):
    """FIFO queue whose pop runs in the background and yields a Future."""

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        self._items: deque[T] = deque()
        self._cond = threading.Condition()
        self._timeout = timeout_ms / 1000.0

    def push(self, item: T) -> None:
        """Append an item and wake one waiting consumer."""
        with self._cond:
            self._items.append(item)
            self._cond.notify()

    def _take(self) -> T | None:
        with self._cond:
            if not self._items:
                self._cond.wait_for(lambda: bool(self._items), timeout=self._timeout)
            if self._items:
                return self._items.popleft()
            return None

    def pop(self) -> Future:
        """Start a pop in a background thread.

        The returned future resolves to the oldest item, or to None if none
        arrived within the timeout.
        """
        future: Future = Future()
        future.set_running_or_notify_cancel()

        def run() -> None:
            try:
                future.set_result(self._take())
            except BaseException as exc:  # pragma: no cover - defensive
                future.set_exception(exc)

        threading.Thread(target=run, daemon=True).start()
        return future