"""
Incidents - SQLAlchemy Store.

============================================================
PURPOSE
============================================================
Database-backed implementation of IncidentStore.

RESPONSIBILITIES:
- Assign IDs and timestamps
- Enforce domain rules (title, status, update text)
- Apply sparse patches
- Cascade incident deletion to updates

CRITICAL REQUIREMENTS:
- One transaction per call
- Contract errors only for invalid input and missing records

============================================================
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session, selectinload, sessionmaker

from core.clock import ClockProtocol, SystemClock
from core.exceptions import RecordInvalidError, RecordNotFoundError
from database.engine import session_scope
from database.models import IncidentRecord, TITLE_MAX_LENGTH, UpdateRecord

from .schemas import (
    Incident,
    IncidentCreate,
    IncidentPatch,
    IncidentStatus,
    TERMINAL_STATUSES,
    Update,
    UpdateCreate,
    UpdatePatch,
)
from .store import IncidentStore


logger = logging.getLogger(__name__)

_VALID_STATUSES = frozenset(s.value for s in IncidentStatus)


# ============================================================
# VALIDATION
# ============================================================

def _check_id(value: str, entity: str) -> str:
    """Normalize an ID, raising RecordInvalidError if it is not a UUID."""
    try:
        return str(uuid.UUID(value))
    except (ValueError, TypeError, AttributeError) as e:
        raise RecordInvalidError(
            f"malformed {entity} id: {value!r}",
            context={"entity": entity, "entity_id": value},
            cause=e,
        ) from e


def _check_title(title: str) -> None:
    if not title.strip():
        raise RecordInvalidError("incident title must not be blank")
    if len(title) > TITLE_MAX_LENGTH:
        raise RecordInvalidError(
            f"incident title longer than {TITLE_MAX_LENGTH} characters",
            context={"length": len(title)},
        )


def _check_status(status: str) -> None:
    if status not in _VALID_STATUSES:
        raise RecordInvalidError(
            f"unknown incident status: {status!r}",
            context={"allowed": sorted(_VALID_STATUSES)},
        )


def _check_text(text: str) -> None:
    if not text.strip():
        raise RecordInvalidError("update text must not be blank")


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ============================================================
# SQL INCIDENT STORE
# ============================================================

class SqlIncidentStore(IncidentStore):
    """
    Incident store backed by a SQLAlchemy session factory.

    Safe to share between requests: every call opens its own
    session and transaction.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        clock: Optional[ClockProtocol] = None,
    ):
        """
        Initialize store.

        Args:
            session_factory: Factory producing sessions on the incident database
            clock: Source of creation/modification timestamps
        """
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    # --------------------------------------------------------
    # INCIDENT QUERIES
    # --------------------------------------------------------

    def get_incidents_before(self, before: datetime, limit: int) -> List[Incident]:
        with session_scope(self._session_factory) as session:
            records = (
                session.query(IncidentRecord)
                .options(selectinload(IncidentRecord.updates))
                .filter(IncidentRecord.created_at < _utc(before))
                .order_by(desc(IncidentRecord.created_at))
                .limit(limit)
                .all()
            )
            return [Incident.model_validate(r) for r in records]

    def get_active_incidents(self) -> List[Incident]:
        with session_scope(self._session_factory) as session:
            records = (
                session.query(IncidentRecord)
                .options(selectinload(IncidentRecord.updates))
                .filter(IncidentRecord.status.notin_(sorted(TERMINAL_STATUSES)))
                .order_by(desc(IncidentRecord.created_at))
                .all()
            )
            return [Incident.model_validate(r) for r in records]

    def get_incident(self, incident_id: str) -> Incident:
        incident_id = _check_id(incident_id, "incident")
        with session_scope(self._session_factory) as session:
            record = self._load_incident(session, incident_id)
            return Incident.model_validate(record)

    # --------------------------------------------------------
    # INCIDENT MUTATIONS
    # --------------------------------------------------------

    def create_incident(self, incident: IncidentCreate) -> str:
        _check_title(incident.title)
        _check_status(incident.status)

        now = self._clock.now()
        record = IncidentRecord(
            id=str(uuid.uuid4()),
            title=incident.title,
            description=incident.description,
            status=incident.status,
            created_at=now,
            updated_at=now,
        )

        with session_scope(self._session_factory) as session:
            session.add(record)

        logger.info(f"Created incident: id={record.id} status={record.status}")
        return record.id

    def edit_incident(self, incident_id: str, patch: IncidentPatch) -> None:
        incident_id = _check_id(incident_id, "incident")
        fields = patch.applied_fields()

        if "title" in fields:
            _check_title(fields["title"])
        if "status" in fields:
            _check_status(fields["status"])

        with session_scope(self._session_factory) as session:
            record = self._load_incident(session, incident_id)
            for name, value in fields.items():
                setattr(record, name, value)
            if fields:
                record.updated_at = self._clock.now()

        logger.info(f"Edited incident: id={incident_id} fields={sorted(fields)}")

    def delete_incident(self, incident_id: str) -> None:
        incident_id = _check_id(incident_id, "incident")
        with session_scope(self._session_factory) as session:
            record = self._load_incident(session, incident_id)
            session.delete(record)

        logger.info(f"Deleted incident: id={incident_id}")

    # --------------------------------------------------------
    # UPDATES
    # --------------------------------------------------------

    def create_update(self, update: UpdateCreate) -> str:
        incident_id = _check_id(update.incident_id, "incident")
        _check_text(update.text)

        now = self._clock.now()
        with session_scope(self._session_factory) as session:
            incident = self._load_incident(session, incident_id)
            record = UpdateRecord(
                id=str(uuid.uuid4()),
                incident_id=incident.id,
                text=update.text,
                created_at=now,
            )
            session.add(record)
            incident.updated_at = now

        logger.info(f"Created update: id={record.id} incident_id={incident_id}")
        return record.id

    def edit_update(self, update_id: str, patch: UpdatePatch) -> None:
        update_id = _check_id(update_id, "update")
        fields = patch.applied_fields()

        if "text" in fields:
            _check_text(fields["text"])

        with session_scope(self._session_factory) as session:
            record = self._load_update(session, update_id)
            for name, value in fields.items():
                setattr(record, name, value)
            if fields:
                record.incident.updated_at = self._clock.now()

        logger.info(f"Edited update: id={update_id}")

    def get_update(self, update_id: str) -> Update:
        update_id = _check_id(update_id, "update")
        with session_scope(self._session_factory) as session:
            return Update.model_validate(self._load_update(session, update_id))

    def delete_update(self, incident_id: str, update_id: str) -> None:
        incident_id = _check_id(incident_id, "incident")
        update_id = _check_id(update_id, "update")

        with session_scope(self._session_factory) as session:
            record = (
                session.query(UpdateRecord)
                .filter(
                    UpdateRecord.id == update_id,
                    UpdateRecord.incident_id == incident_id,
                )
                .first()
            )
            if record is None:
                raise RecordNotFoundError(
                    "update", update_id, context={"incident_id": incident_id}
                )
            session.delete(record)

        logger.info(f"Deleted update: id={update_id} incident_id={incident_id}")

    # --------------------------------------------------------
    # HELPERS
    # --------------------------------------------------------

    @staticmethod
    def _load_incident(session: Session, incident_id: str) -> IncidentRecord:
        record = session.get(IncidentRecord, incident_id)
        if record is None:
            raise RecordNotFoundError("incident", incident_id)
        return record

    @staticmethod
    def _load_update(session: Session, update_id: str) -> UpdateRecord:
        record = session.get(UpdateRecord, update_id)
        if record is None:
            raise RecordNotFoundError("update", update_id)
        return record
