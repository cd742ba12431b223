"""Process-wide leveled logging with a console sink and a DLT-style sink."""

from __future__ import annotations

import logging
import sys
import threading
from enum import IntEnum


class Level(IntEnum):
    """Verbosity levels; a message is emitted when the set level reaches it."""

    ERROR = 0
    WARNING = 1
    INFO = 2
    DEBUG = 3


class Sink(IntEnum):
    """Destinations for log messages."""

    CONSOLE = 0
    DLT = 1


DLT_APP_ID = "WB"
DLT_APP_DESCRIPTION = "Wirelessbridge trace"
DLT_CONTEXT_DESCRIPTION = "wirelessbridge app"

# Messages are formatted into a fixed buffer of 5000 bytes, of which 4999 are
# offered to the formatter, leaving room for 4998 characters.
MAX_MESSAGE_LENGTH = 4998

_lock = threading.RLock()
_level: int = Level.DEBUG
_sink: int = Sink.CONSOLE
_dlt_context: logging.Logger | None = None

_DLT_LEVELS = {
    Level.ERROR: logging.ERROR,
    Level.WARNING: logging.WARNING,
    Level.INFO: logging.INFO,
    Level.DEBUG: logging.DEBUG,
}


def set_debug_level(level: int) -> None:
    """Set the verbosity level used by all print functions."""
    global _level
    _level = int(level)


def set_debug_sink(sink: int) -> None:
    """Select where messages go; unknown sinks fall back to the console."""
    global _sink
    _sink = int(sink)


def get_debug_sink() -> int:
    """Return the currently selected sink."""
    try:
        return Sink(_sink)
    except ValueError:
        return _sink


def init_dlt() -> None:
    """Register the DLT application and context used by the DLT sink."""
    global _dlt_context
    with _lock:
        context = logging.getLogger(f"wirelessbridge.{DLT_APP_ID}")
        context.setLevel(logging.DEBUG)
        _dlt_context = context


def deinit_dlt() -> None:
    """Unregister the DLT context; later DLT messages are dropped."""
    global _dlt_context
    with _lock:
        _dlt_context = None


def _format(fmt: str, args: tuple) -> str:
    return (fmt % args)[:MAX_MESSAGE_LENGTH]


def _enabled(level: Level) -> bool:
    return level == Level.ERROR or _level >= level


def _emit(level: Level, fmt: str, args: tuple) -> None:
    with _lock:
        message = _format(fmt, args)
        if not _enabled(level):
            return
        if _sink == Sink.DLT:
            if _dlt_context is not None:
                _dlt_context.log(_DLT_LEVELS[level], message)
        else:
            sys.stdout.write(f"{message} \n")
            sys.stdout.flush()


def print_error(fmt: str, *args) -> None:
    """Emit an error message; errors are never filtered."""
    _emit(Level.ERROR, fmt, args)


def print_warning(fmt: str, *args) -> None:
    """Emit a warning when the level is above ERROR."""
    _emit(Level.WARNING, fmt, args)


def print_info(fmt: str, *args) -> None:
    """Emit an informational message when the level is above WARNING."""
    _emit(Level.INFO, fmt, args)


def print_debug(fmt: str, *args) -> None:
    """Emit a debug message when the level is above INFO."""
    _emit(Level.DEBUG, fmt, args)