"""
Incident Database Models.

Tables:
- incidents: Outage / maintenance records shown on the status page
- incident_updates: Timestamped progress notes attached to an incident

Deleting an incident deletes its updates.
"""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from database.engine import Base


TITLE_MAX_LENGTH = 255


# =============================================================
# 1. INCIDENTS TABLE
# =============================================================

class IncidentRecord(Base):
    """
    An incident.

    id is assigned on creation and never changes. All timestamps
    are stored as UTC.
    """
    __tablename__ = "incidents"

    id = Column(String(36), primary_key=True)

    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, index=True)  # investigating, identified, monitoring, resolved

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    updates = relationship(
        "UpdateRecord",
        back_populates="incident",
        cascade="all, delete-orphan",
        order_by="UpdateRecord.created_at",
    )

    __table_args__ = (
        Index("idx_incidents_created_at", "created_at"),
    )


# =============================================================
# 2. INCIDENT UPDATES TABLE
# =============================================================

class UpdateRecord(Base):
    """A progress note on an incident."""
    __tablename__ = "incident_updates"

    id = Column(String(36), primary_key=True)
    incident_id = Column(
        String(36),
        ForeignKey("incidents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    incident = relationship("IncidentRecord", back_populates="updates")


__all__ = [
    "IncidentRecord",
    "UpdateRecord",
    "TITLE_MAX_LENGTH",
]
