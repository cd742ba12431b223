"""Central error sink: components report errors, the launcher waits for them."""

from __future__ import annotations

import signal
import sys
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from concurrent.futures import Future
from enum import IntEnum
from typing import Any

from . import slog
from .component import Component, ResolvedDependencies
from .interfaces import Interface, InterfaceSpec
from .queues import UniQueue

ERROR_QUEUE_TIMEOUT_MS = 500

TERMINATION_MESSAGE = "Application termination requested by user"
FATAL_SIGNAL_MESSAGE = "Fatal signal obtained"


class ErrorLevel(IntEnum):
    """How severe a reported error is."""

    USER = 0  # the program closes at once because of a user action
    CRITICAL = 1  # the program closes at once
    SYSTEM = 2  # the program keeps working with limited system functionality
    COMPONENT = 3  # the program keeps working, a component may be unstable


HbeError = tuple[ErrorLevel, str]


class FinalHavenInterface(Interface, ABC, interface_name="System::IFinalHaven"):
    """Accepts error reports and hands them out one at a time."""

    @abstractmethod
    def report(self, level: ErrorLevel, description: str) -> None:
        """Report an error with its level and description."""

    @abstractmethod
    def wait_action(self) -> Future:
        """Return a future resolving to the next reported (level, description)."""


FINAL_HAVEN = InterfaceSpec("FinalHaven", FinalHavenInterface)


class FinalHaven(FinalHavenInterface, Component):
    """Error queue component that also turns SIGTERM and SIGINT into user-level errors."""

    interfaces = (FINAL_HAVEN,)
    depends = ()

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        dependencies: ResolvedDependencies | None = None,
    ) -> None:
        super().__init__(config, dependencies)
        self._queue: UniQueue[HbeError] = UniQueue(ERROR_QUEUE_TIMEOUT_MS)
        try:
            self.install_signal_handlers()
        except ValueError:
            slog.print_debug(
                "FinalHaven/%s: signal handlers not installed outside the main thread",
                "__init__",
            )
        slog.print_debug("FinalHaven/%s: created...", "__init__")

    def register_interfaces(self) -> None:
        self.provide_interface(FINAL_HAVEN)

    def report(self, level: ErrorLevel, description: str) -> None:
        print(f"report: error = {description}", flush=True)
        self._queue.push((ErrorLevel(level), str(description)))

    def wait_action(self) -> Future:
        future: Future = Future()
        future.set_running_or_notify_cancel()

        def run() -> None:
            try:
                while True:
                    item = self._queue.pop().result()
                    if item is not None:
                        future.set_result(item)
                        return
            except BaseException as exc:  # pragma: no cover - defensive
                future.set_exception(exc)

        threading.Thread(target=run, daemon=True).start()
        return future

    def handle_signal(self, sig: int) -> None:
        """Turn a received signal into a user-level error."""
        if sig in (signal.SIGTERM, signal.SIGINT):
            print(
                f"handle_signal: User signal obtained [Signal: {int(sig)} ], exit...",
                flush=True,
            )
            self._queue.push((ErrorLevel.USER, TERMINATION_MESSAGE))
        else:
            print(
                f"handle_signal: Fatal signal obtained [Signal: {int(sig)} ], exit...",
                file=sys.stderr,
                flush=True,
            )
            self._queue.push((ErrorLevel.USER, FATAL_SIGNAL_MESSAGE))

    def _on_signal(self, signum: int, _frame: object) -> None:
        self.handle_signal(signum)

    def install_signal_handlers(self) -> None:
        """Route SIGTERM and SIGINT to this instance; only works in the main thread."""
        signal.signal(signal.SIGTERM, self._on_signal)
        signal.signal(signal.SIGINT, self._on_signal)