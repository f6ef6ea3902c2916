"""
Database Persistence Layer - Core Engine.

============================================================
INCIDENT STORE PERSISTENCE
============================================================

Engine, session and transaction management for the incident
store. Nothing here is global: callers create an engine and a
session factory and hand them to the store explicitly.

Requirements:
- SQLAlchemy ORM (PostgreSQL in production, SQLite for
  development and tests)
- Explicit transaction management
- Hard failures on persistence errors

============================================================
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError, OperationalError
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool

from core.exceptions import StatusPageException, StoreError

logger = logging.getLogger(__name__)

# =============================================================
# DECLARATIVE BASE
# =============================================================

Base = declarative_base()


# =============================================================
# CUSTOM EXCEPTIONS
# =============================================================


class DatabasePersistenceError(StatusPageException):
    """Raised when database persistence fails."""
    pass


class DatabaseConnectionError(DatabasePersistenceError):
    """Raised when database connection fails."""
    pass


class DatabaseInitializationError(DatabasePersistenceError):
    """Raised when database initialization fails."""
    pass


# =============================================================
# DATABASE ENGINE
# =============================================================


def _safe_url(database_url: str) -> str:
    return make_url(database_url).render_as_string(hide_password=True)


def create_database_engine(
    database_url: str,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
    echo: bool = False,
) -> Engine:
    """
    Create SQLAlchemy engine with connection pooling.

    SQLite URLs get a thread-shareable connection; in-memory
    SQLite databases share one connection so every session
    sees the same data.

    Args:
        database_url: SQLAlchemy database URL
        pool_size: Number of connections to keep in pool
        max_overflow: Max connections beyond pool_size
        pool_timeout: Seconds to wait for available connection
        pool_recycle: Recycle connections after N seconds
        echo: Log SQL statements

    Returns:
        SQLAlchemy Engine
    """
    url = make_url(database_url)

    logger.info(f"Creating database engine for: {_safe_url(database_url)}")

    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def enable_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    engine = create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
        echo=echo,
    )

    @event.listens_for(engine, "checkout")
    def on_checkout(dbapi_conn, connection_record, connection_proxy):
        logger.debug("Database connection checked out from pool")

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


# =============================================================
# SESSION MANAGEMENT
# =============================================================


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for explicit transaction boundaries.

    Commits only if no exception occurs.
    Rolls back on ANY exception.

    Store contract errors pass through unchanged; SQLAlchemy
    errors are wrapped in DatabasePersistenceError.

    Usage:
        with session_scope(factory) as session:
            session.add(record)
            # Commits automatically at end
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except StoreError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database transaction failed, rolling back: {e}")
        session.rollback()
        raise DatabasePersistenceError(f"Transaction failed: {e}", cause=e) from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# =============================================================
# DATABASE INITIALIZATION
# =============================================================


def verify_database_connection(engine: Engine) -> bool:
    """
    Verify database connection is working.

    Raises:
        DatabaseConnectionError if connection fails
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
            logger.info("Database connection verified successfully")
            return True
    except OperationalError as e:
        logger.error(f"Database connection failed: {e}")
        raise DatabaseConnectionError(f"Cannot connect to database: {e}", cause=e) from e


def create_all_tables(engine: Engine) -> None:
    """
    Create all tables defined in ORM models.

    Raises:
        DatabaseInitializationError if table creation fails
    """
    from . import models  # noqa: F401

    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database tables: {e}")
        raise DatabaseInitializationError(f"Table creation failed: {e}", cause=e) from e


def initialize_database(engine: Engine) -> None:
    """
    Full database initialization sequence.

    1. Verify connection
    2. Create tables if not exist
    """
    try:
        verify_database_connection(engine)
        create_all_tables(engine)
    except Exception as e:
        logger.critical(f"DATABASE INITIALIZATION FAILED: {e}")
        raise


# =============================================================
# EXPORTS
# =============================================================

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
]
