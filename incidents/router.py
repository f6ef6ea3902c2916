"""
FastAPI Router for Incident Endpoints.

Provides the status page REST API:
- List incidents (before a timestamp, or active ones)
- Create / edit / delete incidents
- Add / edit / fetch / delete incident updates

Failures are raised as ServiceError and rendered by the
application's exception handler.
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from core.exceptions import InternalError
from incidents.service import IncidentService

router = APIRouter(tags=["Incidents"])


# =============================================================
# HELPERS
# =============================================================

def get_incident_service(request: Request) -> IncidentService:
    return request.app.state.incident_service


async def _read_body(request: Request) -> bytes:
    try:
        return await request.body()
    except (ClientDisconnect, RuntimeError) as e:
        raise InternalError("error while getting body data", cause=e) from e


def _render(payload: Union[BaseModel, List[BaseModel]]) -> JSONResponse:
    try:
        if isinstance(payload, list):
            content = [item.model_dump(mode="json") for item in payload]
        else:
            content = payload.model_dump(mode="json")
        return JSONResponse(content=content)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise InternalError("error while rendering json response", cause=e) from e


# =============================================================
# INCIDENT ENDPOINTS
# =============================================================

@router.get("/incidents")
async def list_incidents(
    before: Optional[str] = Query(None, description="RFC 3339 timestamp; defaults to now"),
    service: IncidentService = Depends(get_incident_service),
):
    """Incidents created before `before`, newest first."""
    incidents = await run_in_threadpool(service.list_before, before)
    return _render(incidents)


@router.get("/incidents/active")
async def list_active_incidents(service: IncidentService = Depends(get_incident_service)):
    """Incidents that are not resolved."""
    incidents = await run_in_threadpool(service.list_active)
    return _render(incidents)


@router.get("/incidents/{incident_id}")
async def get_incident(
    incident_id: str,
    service: IncidentService = Depends(get_incident_service),
):
    incident = await run_in_threadpool(service.get_incident, incident_id)
    return _render(incident)


@router.post("/incidents")
async def create_incident(
    request: Request,
    service: IncidentService = Depends(get_incident_service),
):
    """
    Create an incident.

    Body is a JSON incident; the response body is the new ID
    as plain text.
    """
    payload = await _read_body(request)
    incident_id = await run_in_threadpool(service.create_incident, payload)
    return PlainTextResponse(incident_id)


@router.patch("/incidents/{incident_id}")
async def edit_incident(
    incident_id: str,
    request: Request,
    service: IncidentService = Depends(get_incident_service),
):
    """Apply a JSON patch; only the fields present are changed."""
    payload = await _read_body(request)
    await run_in_threadpool(service.edit_incident, incident_id, payload)
    return Response(status_code=200)


@router.delete("/incidents/{incident_id}")
async def delete_incident(
    incident_id: str,
    service: IncidentService = Depends(get_incident_service),
):
    """Delete an incident together with its updates."""
    await run_in_threadpool(service.delete_incident, incident_id)
    return Response(status_code=200)


# =============================================================
# UPDATE ENDPOINTS
# =============================================================

@router.post("/incidents/{incident_id}/updates")
async def add_update(
    incident_id: str,
    request: Request,
    service: IncidentService = Depends(get_incident_service),
):
    """
    Add an update to an incident.

    Body is a JSON update; the incident is always the one in
    the path. The response body is the new ID as plain text.
    """
    payload = await _read_body(request)
    update_id = await run_in_threadpool(service.add_update, incident_id, payload)
    return PlainTextResponse(update_id)


@router.delete("/incidents/{incident_id}/updates/{update_id}")
async def delete_update(
    incident_id: str,
    update_id: str,
    service: IncidentService = Depends(get_incident_service),
):
    await run_in_threadpool(service.delete_update, incident_id, update_id)
    return Response(status_code=200)


@router.get("/updates/{update_id}")
async def get_update(
    update_id: str,
    service: IncidentService = Depends(get_incident_service),
):
    update = await run_in_threadpool(service.get_update, update_id)
    return _render(update)


@router.patch("/updates/{update_id}")
async def edit_update(
    update_id: str,
    request: Request,
    service: IncidentService = Depends(get_incident_service),
):
    """Replace the update's text with the raw request body (not JSON)."""
    payload = await _read_body(request)
    await run_in_threadpool(service.edit_update, update_id, payload)
    return Response(status_code=200)
