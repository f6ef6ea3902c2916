"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the error taxonomy for the incident API.

- Every externally visible failure is one of three kinds
- Store implementations report failures with store errors
- The service layer re-classifies into service errors
- The HTTP boundary maps an error kind to a status code

============================================================
EXCEPTION HIERARCHY
============================================================
StatusPageException (base)
├── ConfigurationError
├── StoreError
│   ├── RecordInvalidError
│   └── RecordNotFoundError
└── ServiceError
    ├── ValidationError       -> 400
    ├── NotFoundError         -> 404
    └── InternalError         -> 500

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Dict, Optional, Type


# ============================================================
# ERROR KINDS
# ============================================================

class ErrorKind(Enum):
    """Closed set of externally visible failure kinds."""

    VALIDATION = "validation"
    """Malformed request or semantically invalid field values."""

    NOT_FOUND = "not_found"
    """Targeted entity does not exist (or has another parent)."""

    INTERNAL = "internal"
    """Anything else: I/O, storage, serialization."""

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]

    @property
    def reason(self) -> str:
        """Standard reason phrase for the status code."""
        return HTTPStatus(self.status_code).phrase


_STATUS_CODES = {
    ErrorKind.VALIDATION: HTTPStatus.BAD_REQUEST.value,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND.value,
    ErrorKind.INTERNAL: HTTPStatus.INTERNAL_SERVER_ERROR.value,
}


# ============================================================
# BASE EXCEPTION
# ============================================================

class StatusPageException(Exception):
    """
    Base exception for all incident API errors.

    All exceptions carry:
    - kind: how the failure surfaces externally
    - context: for debugging
    - cause: the triggering error, if any
    - timestamp: when the error occurred
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)

        self.message = message
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "kind": self.kind.value,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        line = f"[{self.kind.value.upper()}] {type(self).__name__}: {self.message}"
        if ctx_str:
            line += f" | {ctx_str}"
        return line


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(StatusPageException):
    """Error in configuration."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)


# ============================================================
# STORE CONTRACT ERRORS
# ============================================================

class StoreError(StatusPageException):
    """
    Failure reported by a store through its contract.

    Only the subclasses below are part of the contract; any other
    exception escaping a store is treated as unexpected.
    """


class RecordInvalidError(StoreError):
    """Identifier or field values rejected by the store's domain rules."""

    kind = ErrorKind.VALIDATION


class RecordNotFoundError(StoreError):
    """No record with the given identifier (under the given parent)."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, entity_id: str, **kwargs):
        context = kwargs.pop("context", {})
        context["entity"] = entity
        context["entity_id"] = entity_id
        super().__init__(f"{entity} {entity_id} not found", context=context, **kwargs)


# ============================================================
# SERVICE ERRORS
# ============================================================

class ServiceError(StatusPageException):
    """Terminal failure of a service operation."""


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class InternalError(ServiceError):
    kind = ErrorKind.INTERNAL


_SERVICE_ERRORS: Dict[ErrorKind, Type[ServiceError]] = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.INTERNAL: InternalError,
}


def error_for_kind(kind: ErrorKind) -> Type[ServiceError]:
    """Get the service error class for an error kind."""
    return _SERVICE_ERRORS[kind]


# ============================================================
# EXPORTS
# ============================================================

__all__ = [
    "ErrorKind",
    "StatusPageException",
    "ConfigurationError",
    "StoreError",
    "RecordInvalidError",
    "RecordNotFoundError",
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "InternalError",
    "error_for_kind",
]
