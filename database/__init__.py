"""
Database Package Initialization.

============================================================
INCIDENT STORE PERSISTENCE LAYER
============================================================

Engine/session management and ORM models backing the
SQLAlchemy implementation of the incident store.

============================================================
"""

from .engine import (
    Base,
    create_database_engine,
    create_session_factory,
    session_scope,
    verify_database_connection,
    create_all_tables,
    initialize_database,
    DatabasePersistenceError,
    DatabaseConnectionError,
    DatabaseInitializationError,
)

from .models import (
    IncidentRecord,
    UpdateRecord,
)

__all__ = [
    "Base",
    "create_database_engine",
    "create_session_factory",
    "session_scope",
    "verify_database_connection",
    "create_all_tables",
    "initialize_database",
    "DatabasePersistenceError",
    "DatabaseConnectionError",
    "DatabaseInitializationError",
    "IncidentRecord",
    "UpdateRecord",
]
