"""API routes for emergency reports."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from carelink.auth.session import CurrentSession, OptionalSession, ProviderSession
from carelink.database import get_db
from carelink.limiter import SUBMISSION_LIMIT, limiter
from carelink.schemas.emergency import (
    BulkDeleteRequest,
    BulkDeleteResult,
    EmergenciesResponse,
    EmergencyCreate,
    EmergencyOut,
    EmergencyStatusUpdate,
)
from carelink.services.emergency_feed import dedupe_for_display, feed
from carelink.services.emergency_store import EmergencyStore
from carelink.services.errors import InvalidEmergencyError, RecordNotFoundError
from carelink.services.notifications import notify_ambulance_request

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/emergencies", tags=["emergencies"])


@router.post("", response_model=EmergencyOut, status_code=201)
@limiter.limit(SUBMISSION_LIMIT)
async def report_emergency(
    request: Request,
    payload: EmergencyCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: OptionalSession,
    background_tasks: BackgroundTasks,
) -> EmergencyOut:
    """
    Report an emergency.

    Open to anonymous callers; signed-in reports are linked to the account.
    Dashboards receive a fresh snapshot right away.
    """
    store = EmergencyStore(db)
    try:
        emergency = await store.create(payload, user_id=session.user_id if session else None)
    except InvalidEmergencyError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    await feed.publish(db)
    background_tasks.add_task(notify_ambulance_request, emergency)

    return EmergencyOut.model_validate(emergency)


@router.get("", response_model=EmergenciesResponse)
async def list_emergencies(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
    dedupe: bool = Query(True, description="Collapse duplicate reports of the same incident"),
) -> EmergenciesResponse:
    """
    List emergencies for the healthcare dashboard, newest first.

    By default near-duplicate reports are collapsed into the most recent one.
    """
    rows = await EmergencyStore(db).list_all()

    if dedupe:
        emergencies = dedupe_for_display(rows)
    else:
        emergencies = [EmergencyOut.model_validate(row) for row in rows]

    return EmergenciesResponse(
        emergencies=emergencies,
        total=len(rows),
        duplicates_hidden=len(rows) - len(emergencies),
    )


@router.get("/mine", response_model=list[EmergencyOut])
async def list_my_emergencies(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: CurrentSession,
) -> list[EmergencyOut]:
    """Emergencies reported by the signed-in account."""
    rows = await EmergencyStore(db).list_for_user(session.user_id)
    return [EmergencyOut.model_validate(row) for row in rows]


@router.get("/patient/{patient_unique_id}", response_model=list[EmergencyOut])
async def list_patient_emergencies(
    patient_unique_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> list[EmergencyOut]:
    """Emergencies linked to a patient id."""
    rows = await EmergencyStore(db).list_for_patient(patient_unique_id)
    return [EmergencyOut.model_validate(row) for row in rows]


@router.post("/delete", response_model=BulkDeleteResult)
async def delete_emergencies(
    payload: BulkDeleteRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> BulkDeleteResult:
    """Delete several emergencies at once."""
    store = EmergencyStore(db)
    deleted, failed_ids = await store.delete_many(payload.ids)
    await feed.publish(db)

    if failed_ids:
        message = (
            f"Failed to delete {len(failed_ids)} emergency records. "
            f"{deleted} records were deleted successfully."
        )
    else:
        message = f"Deleted {deleted} emergency records"

    return BulkDeleteResult(deleted=deleted, failed_ids=failed_ids, message=message)


@router.get("/{emergency_id}", response_model=EmergencyOut)
async def get_emergency(
    emergency_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> EmergencyOut:
    """Get a specific emergency by ID."""
    emergency = await EmergencyStore(db).get(emergency_id)
    if emergency is None:
        raise HTTPException(status_code=404, detail="Emergency not found")
    return EmergencyOut.model_validate(emergency)


@router.patch("/{emergency_id}/status", response_model=EmergencyOut)
async def update_emergency_status(
    emergency_id: str,
    payload: EmergencyStatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> EmergencyOut:
    """Move an emergency through pending -> in_progress -> completed."""
    try:
        emergency = await EmergencyStore(db).update_status(emergency_id, payload.status)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail="Emergency not found") from e

    await feed.publish(db)
    return EmergencyOut.model_validate(emergency)


@router.delete("/{emergency_id}", status_code=204)
async def delete_emergency(
    emergency_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> Response:
    """Delete one emergency."""
    try:
        await EmergencyStore(db).delete(emergency_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail="Emergency not found") from e

    await feed.publish(db)
    return Response(status_code=204)
