"""Health and readiness endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carelink.database import get_db
from carelink.models import Emergency, Patient
from carelink.websocket.manager import manager as ws_manager

router = APIRouter(tags=["health"])


class EmergencyStats(BaseModel):
    """Emergency counts by status."""

    total: int
    by_status: dict[str, int]
    newest_report: datetime | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    emergencies: EmergencyStats
    patient_count: int
    websocket_connections: int


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthResponse:
    """
    Health check endpoint with storage status.

    Returns emergency counts per status, patient count and the number of
    connected dashboards.
    """
    status_rows = await db.execute(
        select(Emergency.status, func.count(Emergency.id)).group_by(Emergency.status)
    )
    by_status = {status: count for status, count in status_rows.all()}

    newest_result = await db.execute(select(func.max(Emergency.created_at)))
    newest = newest_result.scalar()

    patient_count_result = await db.execute(select(func.count(Patient.id)))
    patient_count = patient_count_result.scalar() or 0

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        emergencies=EmergencyStats(
            total=sum(by_status.values()),
            by_status=by_status,
            newest_report=newest,
        ),
        patient_count=patient_count,
        websocket_connections=ws_manager.connection_count,
    )


@router.get("/ready")
async def readiness_check() -> dict:
    """Simple readiness probe for container orchestration."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Simple liveness probe for container orchestration."""
    return {"status": "alive"}
