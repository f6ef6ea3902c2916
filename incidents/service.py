"""
Incident Service.

This service handles:
- Parsing raw request payloads into incident/update schemas
- Delegating every operation to the injected store
- Classifying failures into validation / not found / internal

Every operation makes at most one store call and never retries.
"""

import logging
from typing import Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from core.clock import ClockProtocol, SystemClock, parse_rfc3339
from core.config import DEFAULT_PAGE_SIZE
from core.exceptions import (
    InternalError,
    StoreError,
    ValidationError,
    error_for_kind,
)

from .schemas import (
    Incident,
    IncidentCreate,
    IncidentPatch,
    Update,
    UpdateCreate,
    UpdatePatch,
)
from .store import IncidentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


# =============================================================
# INCIDENT SERVICE
# =============================================================

class IncidentService:
    """Request-level operations over incidents and their updates."""

    def __init__(
        self,
        store: IncidentStore,
        clock: Optional[ClockProtocol] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._page_size = page_size

    # ---------------------------------------------------------
    # INCIDENT QUERIES
    # ---------------------------------------------------------

    def list_before(self, before: Optional[str] = None) -> List[Incident]:
        """
        List incidents created strictly before a timestamp.

        Args:
            before: RFC 3339 timestamp; empty or None means now

        Raises:
            ValidationError: before is not an RFC 3339 timestamp
            InternalError: store failure
        """
        if not before:
            cutoff = self._clock.now()
        else:
            try:
                cutoff = parse_rfc3339(before)
            except ValueError as e:
                raise ValidationError(
                    "error while parsing 'before' argument",
                    context={"before": before},
                    cause=e,
                ) from e

        logger.debug(f"Listing incidents before {cutoff.isoformat()}")
        return self._call(
            "fetching incidents", self._store.get_incidents_before, cutoff, self._page_size
        )

    def list_active(self) -> List[Incident]:
        """List incidents that are not resolved."""
        return self._call("fetching active incidents", self._store.get_active_incidents)

    def get_incident(self, incident_id: str) -> Incident:
        return self._call("getting incident", self._store.get_incident, incident_id)

    # ---------------------------------------------------------
    # INCIDENT MUTATIONS
    # ---------------------------------------------------------

    def create_incident(self, payload: bytes) -> str:
        """
        Create an incident from a JSON payload.

        Returns:
            The new incident's ID
        """
        incident = self._parse(IncidentCreate, payload, "incident")
        return self._call("creating incident", self._store.create_incident, incident)

    def edit_incident(self, incident_id: str, payload: bytes) -> None:
        """Apply a JSON IncidentPatch; absent fields are left unchanged."""
        patch = self._parse(IncidentPatch, payload, "incident patch")
        self._call("editing incident", self._store.edit_incident, incident_id, patch)

    def delete_incident(self, incident_id: str) -> None:
        self._call("deleting incident", self._store.delete_incident, incident_id)

    # ---------------------------------------------------------
    # UPDATES
    # ---------------------------------------------------------

    def add_update(self, incident_id: str, payload: bytes) -> str:
        """
        Add an update to an incident from a JSON payload.

        Any incident_id inside the payload is replaced by the
        incident_id argument.

        Returns:
            The new update's ID
        """
        update = self._parse(UpdateCreate, payload, "update")
        update.incident_id = incident_id
        return self._call("creating update", self._store.create_update, update)

    def edit_update(self, update_id: str, payload: bytes) -> None:
        """
        Replace an update's text with the raw payload.

        The payload is not JSON: the whole body, decoded as UTF-8,
        becomes the new text.
        """
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError("update text is not valid UTF-8", cause=e) from e

        self._call("editing update", self._store.edit_update, update_id, UpdatePatch(text=text))

    def get_update(self, update_id: str) -> Update:
        return self._call("getting update", self._store.get_update, update_id)

    def delete_update(self, incident_id: str, update_id: str) -> None:
        self._call("deleting update", self._store.delete_update, incident_id, update_id)

    # ---------------------------------------------------------
    # HELPERS
    # ---------------------------------------------------------

    @staticmethod
    def _parse(model: Type[M], payload: bytes, what: str) -> M:
        try:
            return model.model_validate_json(payload)
        except SchemaValidationError as e:
            raise ValidationError(f"error while parsing {what} data", cause=e) from e

    @staticmethod
    def _call(action: str, operation: Callable[..., T], *args) -> T:
        """Run one store operation, classifying whatever it raises."""
        try:
            return operation(*args)
        except StoreError as e:
            raise error_for_kind(e.kind)(
                f"error while {action}: {e.message}", context=dict(e.context), cause=e
            ) from e
        except Exception as e:
            raise InternalError(f"error while {action}", cause=e) from e
