"""
Pydantic Schemas for Incidents and Updates.

Request payloads are parsed from raw bytes; response models are
built from stored records.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================
# ENUMS
# =============================================================

class IncidentStatus(str, Enum):
    INVESTIGATING = "investigating"
    IDENTIFIED = "identified"
    MONITORING = "monitoring"
    RESOLVED = "resolved"


TERMINAL_STATUSES = frozenset({IncidentStatus.RESOLVED.value})


def _assume_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================
# INCIDENT SCHEMAS
# =============================================================

class IncidentCreate(BaseModel):
    """
    Payload for creating an incident.

    Field values are checked by the store; only the shape is
    checked here. Unknown keys (including id and timestamps,
    which the store assigns) are ignored.
    """
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    description: str = ""
    status: str = IncidentStatus.INVESTIGATING.value


class IncidentPatch(BaseModel):
    """
    Sparse overlay for editing an incident.

    Absent and null fields leave the stored value unchanged.
    """
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None

    def applied_fields(self) -> Dict[str, Any]:
        """Fields this patch sets."""
        return self.model_dump(exclude_none=True)


# =============================================================
# UPDATE SCHEMAS
# =============================================================

class UpdateCreate(BaseModel):
    """Payload for adding an update. incident_id is set from the request path."""
    model_config = ConfigDict(extra="ignore")

    incident_id: Optional[str] = None
    text: str = ""


class UpdatePatch(BaseModel):
    """Sparse overlay for editing an update."""

    text: Optional[str] = None

    def applied_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# =============================================================
# RESPONSE SCHEMAS
# =============================================================

class Update(BaseModel):
    """Update as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    incident_id: str
    text: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return _assume_utc(value)


class Incident(BaseModel):
    """Incident as returned by the API, with its updates oldest first."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    status: str
    created_at: datetime
    updated_at: datetime
    updates: List[Update] = Field(default_factory=list)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _timestamps_utc(cls, value: datetime) -> datetime:
        return _assume_utc(value)
