"""
Core Module - System Clock.

============================================================
RESPONSIBILITY
============================================================
Provides a testable clock abstraction and timestamp helpers.

- Stores and the service read "now" from an injected clock
- Enables deterministic testing of time-ordered queries
- All datetimes are timezone-aware UTC

============================================================
"""

import re
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import MAXYEAR, datetime, timedelta, timezone
from typing import Generator, Optional


# ============================================================
# CLOCK PROTOCOL
# ============================================================

class ClockProtocol(ABC):
    """Abstract interface for system clock."""

    @abstractmethod
    def now(self) -> datetime:
        """Get current UTC datetime."""
        pass


# ============================================================
# SYSTEM CLOCK (PRODUCTION)
# ============================================================

class SystemClock(ClockProtocol):
    """Production clock using actual system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


# ============================================================
# MOCK CLOCK (TESTING)
# ============================================================

class MockClock(ClockProtocol):
    """
    Mock clock for testing.

    Allows time manipulation for deterministic tests.
    """

    def __init__(self, initial_time: Optional[datetime] = None):
        """
        Initialize mock clock.

        Args:
            initial_time: Starting time (defaults to current UTC)
        """
        self._time = _as_utc(initial_time or datetime.now(timezone.utc))
        self._lock = threading.Lock()

    def now(self) -> datetime:
        """Get current (mocked) datetime."""
        with self._lock:
            return self._time

    def set_time(self, new_time: datetime) -> None:
        """Set the current time."""
        with self._lock:
            self._time = _as_utc(new_time)

    def advance(self, seconds: float = 0, **kwargs) -> None:
        """
        Advance time by the specified amount.

        Args:
            seconds: Number of seconds to advance
            **kwargs: Passed to timedelta (hours, minutes, days, etc.)
        """
        with self._lock:
            self._time = self._time + timedelta(seconds=seconds, **kwargs)

    @contextmanager
    def freeze(self, at_time: Optional[datetime] = None) -> Generator[None, None, None]:
        """
        Context manager to pin the clock, restoring it afterwards.

        Args:
            at_time: Time to freeze at (defaults to current)
        """
        with self._lock:
            original_time = self._time
            if at_time:
                self._time = _as_utc(at_time)

        try:
            yield
        finally:
            with self._lock:
                self._time = original_time


# ============================================================
# TIMESTAMP UTILITIES
# ============================================================

_RFC3339_PATTERN = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))",
    re.ASCII,
)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso8601(dt: datetime) -> str:
    """Convert datetime to ISO 8601 string. Naive input is taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def parse_rfc3339(text: str) -> datetime:
    """
    Parse an RFC 3339 date-time into an aware UTC datetime.

    The offset is mandatory. Fractional seconds beyond microsecond
    precision are truncated. Instants outside the datetime range
    after conversion to UTC are clamped to datetime.min or datetime.max.

    Raises:
        ValueError: if text is not a valid RFC 3339 date-time
    """
    match = _RFC3339_PATTERN.fullmatch(text)
    if match is None:
        raise ValueError(f"not an RFC 3339 date-time: {text!r}")

    year, month, day, hour, minute, second, fraction, zulu, sign, off_h, off_m = match.groups()

    if zulu:
        tz = timezone.utc
    else:
        offset = timedelta(hours=int(off_h), minutes=int(off_m))
        tz = timezone(-offset if sign == "-" else offset)

    microsecond = int((fraction or "0")[:6].ljust(6, "0"))

    parsed = datetime(
        int(year), int(month), int(day),
        int(hour), int(minute), int(second),
        microsecond,
        tzinfo=tz,
    )
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # Clamp to the representable range
        if parsed.year == MAXYEAR:
            return datetime.max.replace(tzinfo=timezone.utc)
        return datetime.min.replace(tzinfo=timezone.utc)


# ============================================================
# EXPORTS
# ============================================================

__all__ = [
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "to_iso8601",
    "parse_rfc3339",
]
