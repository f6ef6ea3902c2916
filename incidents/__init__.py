"""
Incidents Package.

Incident management for the status page: incidents (outage and
maintenance records) and the timestamped updates posted on them.

Modules:
- schemas: Pydantic models for payloads and responses
- store: Abstract persistence contract
- repository: SQLAlchemy implementation of the store
- service: Request-level operations and error classification
- router: FastAPI endpoints

Usage:
    from incidents.service import IncidentService
    from incidents.repository import SqlIncidentStore
    from incidents.router import router as incidents_router
"""

from incidents.schemas import (
    Incident,
    IncidentCreate,
    IncidentPatch,
    IncidentStatus,
    TERMINAL_STATUSES,
    Update,
    UpdateCreate,
    UpdatePatch,
)

from incidents.store import IncidentStore
from incidents.repository import SqlIncidentStore
from incidents.service import IncidentService
from incidents.router import router

__all__ = [
    # Schemas
    "Incident",
    "IncidentCreate",
    "IncidentPatch",
    "IncidentStatus",
    "TERMINAL_STATUSES",
    "Update",
    "UpdateCreate",
    "UpdatePatch",
    # Store
    "IncidentStore",
    "SqlIncidentStore",
    # Service
    "IncidentService",
    # Router
    "router",
]
