"""Health and readiness endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel
from sqlalchemy import func, select

from crisisconnect.dependencies import DbSession
from crisisconnect.models import HelpRequest, Incident, Task
from crisisconnect.models.enums import HelpRequestStatus, IncidentStatus, TaskStatus

router = APIRouter(tags=["health"])


class BacklogStatus(BaseModel):
    """Work waiting on someone."""

    pending_incidents: int
    pending_requests: int
    assigned_tasks: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    websocket_connections: int
    backlog: BacklogStatus


async def _count(db, column, condition) -> int:
    result = await db.execute(select(func.count(column)).where(condition))
    return result.scalar() or 0


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, db: DbSession) -> HealthResponse:
    """
    Health check endpoint with backlog counts.

    Touches the database, so a failing connection surfaces as a 500.
    """
    backlog = BacklogStatus(
        pending_incidents=await _count(
            db, Incident.id, Incident.status == IncidentStatus.PENDING
        ),
        pending_requests=await _count(
            db, HelpRequest.id, HelpRequest.status == HelpRequestStatus.PENDING
        ),
        assigned_tasks=await _count(db, Task.id, Task.status == TaskStatus.ASSIGNED),
    )
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        websocket_connections=request.app.state.realtime.connection_count,
        backlog=backlog,
    )


@router.get("/ready")
async def readiness_check() -> dict:
    """Simple readiness probe for container orchestration."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Simple liveness probe for container orchestration."""
    return {"status": "alive"}
