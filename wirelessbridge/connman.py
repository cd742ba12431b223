"""Connection manager: keeps reconnecting registered clients until they give up."""

from __future__ import annotations

import threading
import weakref
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from . import slog
from .component import Component, ResolvedDependencies
from .executor import EXECUTOR
from .finalhaven import FINAL_HAVEN, ErrorLevel
from .interfaces import Interface, InterfaceSpec
from .systime import system_time_msec

HANDLER_PERIOD_MS = 100
DOUBLE_INSERTION_MESSAGE = "ConnMan error - double insertion !"


class ConnectionStatus(IntEnum):
    """State of a client's connection."""

    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2


@dataclass(frozen=True)
class ConnectionInfo:
    """Reconnection policy of a client."""

    connection_attempt: int = 4  # attempts before the connection counts as failed
    connection_timeout_ms: int = 1000  # time one connection attempt may take
    connection_cycle_timeout_ms: int = 5000  # pause before the next attempt


class Connectable(ABC):
    """A client that can be connected and reconnected."""

    @abstractmethod
    def connect(self) -> None:
        """Start connecting to the remote server."""

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the remote server."""

    @abstractmethod
    def state(self) -> ConnectionStatus:
        """Return the current connection status."""

    @abstractmethod
    def client_info(self) -> ConnectionInfo:
        """Return the client's reconnection policy."""


class ConnManInterface(Interface, ABC, interface_name="System::IConnMan"):
    """Accepts clients to watch and reconnect."""

    @abstractmethod
    def subscribe(self, name: str, client: Connectable) -> None:
        """Watch a client under a name."""

    @abstractmethod
    def unsubscribe(self, name: str) -> None:
        """Stop watching the client under a name."""


CONNMAN = InterfaceSpec("ConnMan", ConnManInterface)


@dataclass
class _ServiceBlock:
    client: weakref.ref
    spent_attempt: int = 0
    time_to_attempt: int = 0


class ConnMan(ConnManInterface, Component):
    """Reconnects disconnected clients periodically, reporting exhausted ones."""

    interfaces = (CONNMAN,)
    depends = (FINAL_HAVEN, EXECUTOR)

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        dependencies: ResolvedDependencies | None = None,
    ) -> None:
        super().__init__(config, dependencies)
        self._lock = threading.RLock()
        self._items: dict[str, _ServiceBlock] = {}
        self._closed = False
        executor = self.dependencies.get_interface(EXECUTOR.name)
        self._cyclic_id = executor.execute_cyclic(self.connection_handler, HANDLER_PERIOD_MS)
        slog.print_debug("ConnMan/%s: created...", "__init__")

    def register_interfaces(self) -> None:
        self.provide_interface(CONNMAN)

    def _report(self, message: str) -> None:
        haven = self.dependencies.get_interface(FINAL_HAVEN.name)
        if haven is not None:
            haven.report(ErrorLevel.SYSTEM, message)

    def subscribe(self, name: str, client: Connectable) -> None:
        with self._lock:
            if name in self._items:
                self._report(DOUBLE_INSERTION_MESSAGE)
                return
            self._items[name] = _ServiceBlock(weakref.ref(client))
        slog.print_debug("ConnMan/%s:  component '%s' subscribed", "subscribe", name)

    def unsubscribe(self, name: str) -> None:
        with self._lock:
            self._items.pop(name, None)
        slog.print_debug("ConnMan/%s:  component '%s' unsubscribed", "unsubscribe", name)

    def connection_handler(self, now_ms: int | None = None) -> None:
        """Run one reconnection pass at the given time (now by default)."""
        now = system_time_msec() if now_ms is None else now_ms
        slog.print_debug("ConnMan/%s: iteration time = %i", "connection_handler", now)

        with self._lock:
            for name, block in list(self._items.items()):
                client = block.client()
                if client is None:
                    continue
                status = client.state()
                if status == ConnectionStatus.DISCONNECTED:
                    if now <= block.time_to_attempt:
                        continue
                    info = client.client_info()
                    if block.spent_attempt < info.connection_attempt:
                        slog.print_debug(
                            "ConnMan/%s: call reconnect for '%s', attempt %i",
                            "connection_handler", name, block.spent_attempt,
                        )
                        client.connect()
                        block.spent_attempt += 1
                        block.time_to_attempt = (
                            now + info.connection_timeout_ms + info.connection_cycle_timeout_ms
                        )
                    else:
                        exhausted_now = block.spent_attempt == info.connection_attempt
                        block.spent_attempt += 1
                        if exhausted_now:
                            message = f"connection '{name}' , all attempt exhausted !!!"
                            slog.print_error("ConnMan/%s: %s", "connection_handler", message)
                            self._report(message)
                elif status == ConnectionStatus.CONNECTED:
                    block.spent_attempt = 0

    def close(self) -> None:
        """Stop the periodic reconnection pass."""
        if self._closed:
            return
        self._closed = True
        executor = self.dependencies.get_interface(EXECUTOR.name)
        if executor is not None:
            executor.stop_cyclic(self._cyclic_id)
        slog.print_debug("ConnMan/%s: deleted.", "close")