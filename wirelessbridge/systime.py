"""Monotonic system time in microseconds and milliseconds."""

import time


def system_time_usec() -> int:
    """Return monotonic clock time in whole microseconds."""
    return time.monotonic_ns() // 1_000


def system_time_msec() -> int:
    """Return monotonic clock time in whole milliseconds."""
    return time.monotonic_ns() // 1_000_000