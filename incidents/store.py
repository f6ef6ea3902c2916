"""
Incidents - Store Interface.

============================================================
PURPOSE
============================================================
Abstract persistence contract the incident service depends on.

CONTRACT:
- The store assigns IDs and timestamps
- Identifiers the store cannot interpret raise RecordInvalidError
- Field values breaking domain rules raise RecordInvalidError
- Missing records (or an update under the wrong incident)
  raise RecordNotFoundError
- Any other exception is an unexpected failure
- Deleting an incident deletes its updates

============================================================
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from .schemas import (
    Incident,
    IncidentCreate,
    IncidentPatch,
    Update,
    UpdateCreate,
    UpdatePatch,
)


class IncidentStore(ABC):
    """Persistence for incidents and their updates."""

    # --------------------------------------------------------
    # INCIDENT QUERIES
    # --------------------------------------------------------

    @abstractmethod
    def get_incidents_before(self, before: datetime, limit: int) -> List[Incident]:
        """
        Get incidents created strictly before a point in time.

        Args:
            before: Exclusive upper bound on created_at (aware UTC)
            limit: Maximum number of incidents

        Returns:
            Incidents, newest first
        """
        pass

    @abstractmethod
    def get_active_incidents(self) -> List[Incident]:
        """Get incidents not in a terminal status, newest first."""
        pass

    @abstractmethod
    def get_incident(self, incident_id: str) -> Incident:
        pass

    # --------------------------------------------------------
    # INCIDENT MUTATIONS
    # --------------------------------------------------------

    @abstractmethod
    def create_incident(self, incident: IncidentCreate) -> str:
        """Create an incident and return its new ID."""
        pass

    @abstractmethod
    def edit_incident(self, incident_id: str, patch: IncidentPatch) -> None:
        """Apply the fields present in patch to an incident."""
        pass

    @abstractmethod
    def delete_incident(self, incident_id: str) -> None:
        pass

    # --------------------------------------------------------
    # UPDATES
    # --------------------------------------------------------

    @abstractmethod
    def create_update(self, update: UpdateCreate) -> str:
        """Attach an update to update.incident_id and return its new ID."""
        pass

    @abstractmethod
    def edit_update(self, update_id: str, patch: UpdatePatch) -> None:
        pass

    @abstractmethod
    def get_update(self, update_id: str) -> Update:
        pass

    @abstractmethod
    def delete_update(self, incident_id: str, update_id: str) -> None:
        """Delete an update, only if it belongs to incident_id."""
        pass
