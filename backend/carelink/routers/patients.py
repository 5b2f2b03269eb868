"""API routes for patient records."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from carelink.auth.session import CurrentSession, ProviderSession
from carelink.database import get_db
from carelink.schemas.patient import PatientCreate, PatientFieldsUpdate, PatientOut, PatientRecord
from carelink.services.errors import (
    DuplicatePatientError,
    InvalidPatientError,
    RecordNotFoundError,
)
from carelink.services.patient_store import PatientStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("", response_model=list[PatientOut])
async def list_patients(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> list[PatientOut]:
    """All patients ordered by name."""
    patients = await PatientStore(db).list_all()
    return [PatientOut.model_validate(p) for p in patients]


@router.post("", response_model=PatientOut, status_code=201)
async def create_patient(
    payload: PatientCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> PatientOut:
    """Register a new patient."""
    try:
        patient = await PatientStore(db).create(payload)
    except DuplicatePatientError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except InvalidPatientError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return PatientOut.model_validate(patient)


@router.get("/me", response_model=PatientOut)
async def get_my_record(
    db: Annotated[AsyncSession, Depends(get_db)],
    session: CurrentSession,
) -> PatientOut:
    """The signed-in account's own medical record."""
    patient = await PatientStore(db).get(session.user_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient record not found")
    return PatientOut.model_validate(patient)


@router.patch("/me", response_model=PatientOut)
async def update_my_record(
    payload: PatientFieldsUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    session: CurrentSession,
) -> PatientOut:
    """Merge changes into the caller's record, creating it on first use."""
    try:
        patient = await PatientStore(db).upsert_patient_fields(session.user_id, payload)
    except DuplicatePatientError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return PatientOut.model_validate(patient)


@router.get("/{patient_id}", response_model=PatientOut)
async def get_patient(
    patient_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> PatientOut:
    """Get a specific patient by ID."""
    patient = await PatientStore(db).get(patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return PatientOut.model_validate(patient)


@router.put("/{patient_id}", response_model=PatientOut)
async def replace_patient(
    patient_id: str,
    payload: PatientCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> PatientOut:
    """Overwrite a patient record."""
    record = PatientRecord(id=patient_id, **payload.model_dump())
    try:
        patient = await PatientStore(db).replace_patient(record)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail="Patient not found") from e
    return PatientOut.model_validate(patient)


@router.patch("/{patient_id}", response_model=PatientOut)
async def update_patient_fields(
    patient_id: str,
    payload: PatientFieldsUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> PatientOut:
    """Merge changes into a patient record, creating it when missing."""
    try:
        patient = await PatientStore(db).upsert_patient_fields(patient_id, payload)
    except DuplicatePatientError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return PatientOut.model_validate(patient)


@router.delete("/{patient_id}", status_code=204)
async def delete_patient(
    patient_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: ProviderSession,
) -> Response:
    """Delete a patient record."""
    try:
        await PatientStore(db).delete(patient_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail="Patient not found") from e
    return Response(status_code=204)
