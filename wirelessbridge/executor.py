"""Worker threads running one-off and periodic tasks."""

from __future__ import annotations

import heapq
import itertools
import os
import random
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from . import slog
from .component import Component, ResolvedDependencies
from .finalhaven import FINAL_HAVEN, ErrorLevel
from .interfaces import Interface, InterfaceSpec

_MAX_CYCLIC_ID = 2**31


class ExecutorInterface(Interface, ABC, interface_name="System::IExecutor"):
    """Runs functions asynchronously, once or periodically."""

    @abstractmethod
    def execute(self, func: Callable[[], object]) -> None:
        """Run a function once on a worker."""

    @abstractmethod
    def execute_cyclic(self, func: Callable[[], object], period_ms: int) -> int:
        """Run a function every period; return the id that stops it."""

    @abstractmethod
    def stop_cyclic(self, cyclic_id: int) -> None:
        """Stop a periodic function by id; unknown ids are ignored."""


EXECUTOR = InterfaceSpec("Executor", ExecutorInterface)


@dataclass(eq=False)
class _Cycle:
    func: Callable[[], object]
    period: float


class Executor(ExecutorInterface, Component):
    """Thread pool, one worker per CPU, started when the component starts.

    Work posted before the start waits for it; periodic deadlines count from
    the moment they are registered, each next deadline from the previous one.
    """

    interfaces = (EXECUTOR,)
    depends = (FINAL_HAVEN,)

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        dependencies: ResolvedDependencies | None = None,
    ) -> None:
        super().__init__(config, dependencies)
        self._cond = threading.Condition()
        self._tasks: deque[Callable[[], object]] = deque()
        self._timers: list[tuple[float, int, int, _Cycle]] = []
        self._cycles: dict[int, _Cycle] = {}
        self._seq = itertools.count()
        self._workers: list[threading.Thread] = []
        self._stopped = False
        slog.print_debug("Executor/%s: created...", "__init__")

    def register_interfaces(self) -> None:
        self.provide_interface(EXECUTOR)

    def start_component(self) -> None:
        """Start one worker thread per hardware thread."""
        with self._cond:
            if self._stopped or self._workers:
                return
            for index in range(os.cpu_count() or 1):
                worker = threading.Thread(target=self._worker, daemon=True)
                self._workers.append(worker)
                worker.start()
                slog.print_debug("Executor/%s: worker %i created", "start_component", index)

    def execute(self, func: Callable[[], object]) -> None:
        with self._cond:
            self._tasks.append(func)
            self._cond.notify()

    def execute_cyclic(self, func: Callable[[], object], period_ms: int) -> int:
        period = period_ms / 1000.0
        cycle = _Cycle(func, period)
        with self._cond:
            cyclic_id = random.randrange(_MAX_CYCLIC_ID)
            while cyclic_id in self._cycles:
                cyclic_id = random.randrange(_MAX_CYCLIC_ID)
            self._cycles[cyclic_id] = cycle
            heapq.heappush(
                self._timers,
                (time.monotonic() + period, next(self._seq), cyclic_id, cycle),
            )
            self._cond.notify_all()
        return cyclic_id

    def stop_cyclic(self, cyclic_id: int) -> None:
        with self._cond:
            if self._cycles.pop(cyclic_id, None) is not None:
                slog.print_debug(
                    "Executor/%s: cyclic function id = %i stopped", "stop_cyclic", cyclic_id
                )

    def stop(self) -> None:
        """Drop all periodic work, stop the workers and wait for them."""
        with self._cond:
            self._cycles.clear()
            self._timers.clear()
            if self._stopped:
                return
            self._stopped = True
            self._cond.notify_all()
            workers = list(self._workers)
        current = threading.current_thread()
        for worker in workers:
            if worker is not current:
                worker.join()
        slog.print_debug("Executor/%s: stopped.", "stop")

    def _fire_due(self, now: float) -> None:
        deadline, _, cyclic_id, cycle = heapq.heappop(self._timers)
        if self._cycles.get(cyclic_id) is not cycle:
            return
        slog.print_debug(
            "Executor/%s: execution cyclic function id = %i", "execute_cyclic", cyclic_id
        )
        self._tasks.append(cycle.func)
        heapq.heappush(
            self._timers, (deadline + cycle.period, next(self._seq), cyclic_id, cycle)
        )
        self._cond.notify_all()

    def _next_task(self) -> Callable[[], object] | None:
        with self._cond:
            while True:
                if self._stopped:
                    return None
                if self._tasks:
                    return self._tasks.popleft()
                now = time.monotonic()
                if self._timers and self._timers[0][0] <= now:
                    self._fire_due(now)
                    continue
                timeout = self._timers[0][0] - now if self._timers else None
                self._cond.wait(timeout)

    def _worker(self) -> None:
        slog.print_debug("Executor/%s: worker started", "worker")
        while (task := self._next_task()) is not None:
            try:
                task()
            except Exception as exc:
                message = f"Error while processing asynchronous function: {exc}"
                slog.print_error("Executor/%s: %s", "worker", message)
                haven = self.dependencies.get_interface(FINAL_HAVEN.name)
                if haven is not None:
                    haven.report(ErrorLevel.SYSTEM, message)
        slog.print_debug("Executor/%s: worker stopped", "worker")