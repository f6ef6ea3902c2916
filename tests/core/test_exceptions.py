"""
Tests for the error taxonomy.
"""

import pytest

from core.exceptions import (
    ErrorKind,
    InternalError,
    NotFoundError,
    RecordInvalidError,
    RecordNotFoundError,
    ServiceError,
    StoreError,
    ValidationError,
    error_for_kind,
)


class TestErrorKind:
    """Test status code mapping."""

    @pytest.mark.parametrize("kind,status_code,reason", [
        (ErrorKind.VALIDATION, 400, "Bad Request"),
        (ErrorKind.NOT_FOUND, 404, "Not Found"),
        (ErrorKind.INTERNAL, 500, "Internal Server Error"),
    ])
    def test_status_and_reason(self, kind, status_code, reason):
        assert kind.status_code == status_code
        assert kind.reason == reason

    def test_error_for_kind(self):
        assert error_for_kind(ErrorKind.VALIDATION) is ValidationError
        assert error_for_kind(ErrorKind.NOT_FOUND) is NotFoundError
        assert error_for_kind(ErrorKind.INTERNAL) is InternalError


class TestStoreErrors:
    """Test store contract errors."""

    def test_store_error_kinds(self):
        assert RecordInvalidError("bad").kind is ErrorKind.VALIDATION
        assert RecordNotFoundError("incident", "abc").kind is ErrorKind.NOT_FOUND

    def test_not_found_context(self):
        error = RecordNotFoundError("update", "u-1", context={"incident_id": "i-1"})
        assert error.message == "update u-1 not found"
        assert error.context == {"incident_id": "i-1", "entity": "update", "entity_id": "u-1"}
        assert isinstance(error, StoreError)


class TestServiceErrors:
    """Test service errors carry their cause."""

    def test_cause_recorded(self):
        cause = ValueError("boom")
        error = InternalError("error while creating incident", cause=cause)

        assert isinstance(error, ServiceError)
        assert error.cause is cause
        assert error.context["cause_type"] == "ValueError"
        assert error.to_dict()["kind"] == "internal"

    def test_log_format(self):
        error = ValidationError("bad payload", context={"field": "title"})
        line = error.to_log_format()
        assert line.startswith("[VALIDATION] ValidationError: bad payload")
        assert "field=title" in line
