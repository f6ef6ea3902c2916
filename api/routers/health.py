from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    uptime_seconds: float = 0


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Liveness check."""
    now = datetime.now(timezone.utc)
    uptime = (now - request.app.state.started_at).total_seconds()
    return HealthResponse(
        status="healthy",
        timestamp=now.isoformat(),
        version=request.app.version,
        uptime_seconds=uptime,
    )
