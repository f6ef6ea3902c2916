"""
Core Module Package.

This package contains the core infrastructure components
that all other modules depend on.

Components:
- clock: Unified time abstraction and RFC 3339 parsing
- config: Environment-driven settings
- exceptions: Error taxonomy (validation / not found / internal)
"""

from .clock import ClockProtocol, SystemClock, MockClock, parse_rfc3339
from .config import Settings
from .exceptions import (
    ErrorKind,
    StatusPageException,
    StoreError,
    RecordInvalidError,
    RecordNotFoundError,
    ServiceError,
    ValidationError,
    NotFoundError,
    InternalError,
)

__all__ = [
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "parse_rfc3339",
    "Settings",
    "ErrorKind",
    "StatusPageException",
    "StoreError",
    "RecordInvalidError",
    "RecordNotFoundError",
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "InternalError",
]
