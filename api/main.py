"""
Status Page API - Application.

============================================================
RESPONSIBILITY
============================================================
Builds the FastAPI application:

- Wires the incident service to an explicitly provided store
  (or a SQLAlchemy store built from settings)
- Maps service errors to plain-text status responses
- Logs every terminal failure once, at this boundary

============================================================
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from api import __version__
from api.routers import health
from core.clock import ClockProtocol
from core.config import Settings
from core.exceptions import ErrorKind, ServiceError
from database.engine import create_database_engine, create_session_factory, initialize_database
from incidents.repository import SqlIncidentStore
from incidents.router import router as incidents_router
from incidents.service import IncidentService
from incidents.store import IncidentStore

logger = logging.getLogger(__name__)


# ============================================================
# ERROR HANDLING
# ============================================================

async def handle_service_error(request: Request, exc: ServiceError) -> PlainTextResponse:
    """Render a ServiceError as its status code and reason phrase."""
    where = f"{request.method} {request.url.path}"
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(f"{where} failed: {exc.to_log_format()}", exc_info=exc.cause)
    else:
        logger.warning(f"{where} rejected: {exc.to_log_format()}")

    return PlainTextResponse(exc.kind.reason, status_code=exc.kind.status_code)


# ============================================================
# STORE WIRING
# ============================================================

def build_store(settings: Settings, clock: Optional[ClockProtocol] = None) -> SqlIncidentStore:
    """Create the SQLAlchemy incident store described by settings."""
    engine = create_database_engine(settings.database_url, echo=settings.database_echo)
    if settings.auto_create_tables:
        initialize_database(engine)
    return SqlIncidentStore(create_session_factory(engine), clock=clock)


# ============================================================
# APPLICATION FACTORY
# ============================================================

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[IncidentStore] = None,
    clock: Optional[ClockProtocol] = None,
) -> FastAPI:
    """
    Create the API application.

    Args:
        settings: Settings (defaults to the environment)
        store: Incident store (defaults to a SQLAlchemy store on
            settings.database_url)
        clock: Clock for "now" defaults and timestamps

    Returns:
        Configured FastAPI app
    """
    settings = settings or Settings.from_env()
    store = store or build_store(settings, clock=clock)

    app = FastAPI(
        title="Status Page Incident API",
        description="Incidents and incident updates for the public status page.",
        version=__version__,
    )

    app.state.incident_service = IncidentService(store, clock=clock, page_size=settings.page_size)
    app.state.started_at = datetime.now(timezone.utc)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, handle_service_error)

    app.include_router(incidents_router)
    app.include_router(health.router)

    logger.info(f"Incident API ready (store={type(store).__name__}, page_size={settings.page_size})")
    return app
