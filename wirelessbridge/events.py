"""Event queues and listener threads that feed events to a handler."""

from __future__ import annotations

import threading
import weakref
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Generic, TypeVar

from .queues import DEFAULT_TIMEOUT_MS, BlockingQueue

T = TypeVar("T")


class EventConsumer(ABC, Generic[T]):
    """Something events can be taken from."""

    @abstractmethod
    def consume_event(self) -> T | None:
        """Return the next event, or None if none arrived in time."""


class EventSender(ABC, Generic[T]):
    """Something events can be handed to."""

    @abstractmethod
    def send_event(self, event: T) -> None:
        """Queue an event for consumers."""


class EventLoop(EventConsumer[T], EventSender[T]):
    """An event queue that is both a sender and a consumer."""

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        self._queue: BlockingQueue[T] = BlockingQueue(timeout_ms)

    def send_event(self, event: T) -> None:
        self._queue.push(event)

    def consume_event(self) -> T | None:
        return self._queue.pop()


class EventLoopHolder(Generic[T]):
    """Owns an event loop; exposes it as a consumer and as a sender."""

    def __init__(self) -> None:
        self._event_loop: EventLoop[T] = EventLoop()

    def event_consumer(self) -> EventConsumer[T]:
        """Return the side events are consumed from."""
        return self._event_loop

    def event_sender(self) -> EventSender[T]:
        """Return the side events are sent to."""
        return self._event_loop


class _ListenerThread(Generic[T]):
    """Background thread passing every non-None event to a handler.

    The loop ends when halted, when its event source is gone, or when the
    handler raises; in the last case the error is printed.
    """

    def __init__(
        self,
        source: Callable[[], EventConsumer[T] | None],
        func: Callable[[T], object],
    ) -> None:
        self._source = source
        self._func = func
        self._interrupted = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        try:
            while not self._interrupted.is_set():
                consumer = self._source()
                if consumer is None:
                    break
                event = consumer.consume_event()
                if event is not None:
                    self._func(event)
        except Exception as exc:
            print(f"event_loop: Error: {exc}", flush=True)

    def halt(self) -> None:
        self._interrupted.set()
        if self._thread is not threading.current_thread() and self._thread.is_alive():
            self._thread.join()


class EventListener(Generic[T]):
    """Listens on an event consumer, held weakly."""

    def __init__(self, consumer: EventConsumer[T], func: Callable[[T], object]) -> None:
        self._consumer_ref = weakref.ref(consumer)
        self._worker: _ListenerThread[T] = _ListenerThread(self._consumer_ref, func)

    def stop(self) -> None:
        """Ask the loop to end and wait for its thread."""
        self._worker.halt()

    def __enter__(self) -> EventListener[T]:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


class EventHolderListener(Generic[T]):
    """Listens on the consumer of an event loop holder, held weakly."""

    def __init__(self, holder: EventLoopHolder[T], func: Callable[[T], object]) -> None:
        self._holder_ref = weakref.ref(holder)
        self._worker: _ListenerThread[T] = _ListenerThread(self._consumer, func)

    def _consumer(self) -> EventConsumer[T] | None:
        holder = self._holder_ref()
        if holder is None:
            return None
        return holder.event_consumer()

    def stop(self) -> None:
        """Ask the loop to end and wait for its thread."""
        self._worker.halt()

    def __enter__(self) -> EventHolderListener[T]:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()