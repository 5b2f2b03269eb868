"""Data-access service for patient records."""

import logging
import secrets
import string
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from carelink.models import Patient
from carelink.schemas.patient import (
    HealthMetrics,
    HealthMetricsUpdate,
    PatientCreate,
    PatientFieldsUpdate,
    PatientRecord,
)
from carelink.services.errors import (
    DuplicatePatientError,
    InvalidPatientError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_PATIENT_NAME = "New Patient"

_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_patient_unique_id() -> str:
    """Generate a human-friendly patient id such as `PT-7QXA-K2M9`."""

    def block() -> str:
        return "".join(secrets.choice(_ID_ALPHABET) for _ in range(4))

    return f"PT-{block()}-{block()}"


def merge_health_metrics(
    current: dict[str, Any] | None, update: HealthMetricsUpdate | None
) -> dict[str, Any]:
    """Overlay set values of `update` on the stored metrics, filling defaults."""
    merged = HealthMetrics.model_validate(current or {}).model_dump()
    if update is not None:
        merged.update(update.model_dump(exclude_none=True))
    return merged


class PatientStore:
    """
    Create, read, update and delete patient records.

    Updates come in two explicit flavours: `replace_patient` overwrites a
    whole record, `upsert_patient_fields` merges a partial update for an
    account and creates the record when it does not exist yet.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> list[Patient]:
        """All patients ordered by name."""
        result = await self.db.execute(select(Patient).order_by(Patient.name.asc()))
        return list(result.scalars().all())

    async def get(self, patient_id: str) -> Patient | None:
        if not patient_id:
            return None
        return await self.db.get(Patient, patient_id)

    async def get_by_email_or_phone(self, email: str | None, phone: str | None) -> Patient | None:
        """Find an existing patient by email first, then by phone."""
        if email:
            result = await self.db.execute(select(Patient).where(Patient.email == email).limit(1))
            patient = result.scalar_one_or_none()
            if patient is not None:
                return patient

        if phone:
            result = await self.db.execute(select(Patient).where(Patient.phone == phone).limit(1))
            patient = result.scalar_one_or_none()
            if patient is not None:
                return patient

        return None

    async def create(self, data: PatientCreate, patient_id: str | None = None) -> Patient:
        """
        Insert a patient record.

        Raises:
            InvalidPatientError: The name is missing
            DuplicatePatientError: Email or phone is already registered
        """
        if not data.name:
            raise InvalidPatientError("Patient name is required")

        if data.email or data.phone:
            existing = await self.get_by_email_or_phone(data.email, data.phone)
            if existing is not None:
                field = "email" if data.email and existing.email == data.email else "phone number"
                raise DuplicatePatientError(f"A patient with this {field} already exists.")

        patient = Patient(
            patient_unique_id=generate_patient_unique_id(),
            name=data.name,
            email=data.email,
            phone=data.phone,
            blood_type=data.blood_type,
            allergies=list(data.allergies),
            medical_history=[entry.model_dump() for entry in data.medical_history],
            health_metrics=data.health_metrics.model_dump(),
            last_checkup=data.last_checkup or None,
        )
        if patient_id:
            patient.id = patient_id

        self.db.add(patient)
        await self.db.commit()
        await self.db.refresh(patient)

        logger.info(f"Created patient {patient.id} ({patient.patient_unique_id})")
        return patient

    async def replace_patient(self, record: PatientRecord) -> Patient:
        """Overwrite every field of an existing patient with `record`."""
        patient = await self.get(record.id)
        if patient is None:
            raise RecordNotFoundError("Patient", record.id)

        patient.name = record.name
        patient.email = record.email
        patient.phone = record.phone
        patient.blood_type = record.blood_type
        patient.allergies = list(record.allergies)
        patient.medical_history = [entry.model_dump() for entry in record.medical_history]
        patient.health_metrics = record.health_metrics.model_dump()
        patient.last_checkup = record.last_checkup or None

        await self.db.commit()
        await self.db.refresh(patient)

        logger.info(f"Replaced patient {patient.id}")
        return patient

    async def upsert_patient_fields(self, user_id: str, fields: PatientFieldsUpdate) -> Patient:
        """
        Merge a partial update into the patient record owned by `user_id`.

        Fields left unset keep their stored value. When no record exists a new
        one is created with `user_id` as its id.
        """
        if not user_id:
            raise InvalidPatientError("User id is required")

        patient = await self.get(user_id)
        if patient is None:
            logger.info(f"No patient record for {user_id}, creating one")
            new_patient = PatientCreate(
                name=fields.name or DEFAULT_PATIENT_NAME,
                email=fields.email or "",
                phone=fields.phone or "",
                blood_type=fields.blood_type or "",
                allergies=fields.allergies or [],
                medical_history=fields.medical_history or [],
                health_metrics=HealthMetrics(**merge_health_metrics(None, fields.health_metrics)),
                last_checkup=fields.last_checkup,
            )
            return await self.create(new_patient, patient_id=user_id)

        updates = fields.model_dump(
            exclude_unset=True, exclude_none=True, exclude={"health_metrics", "medical_history"}
        )
        for key, value in updates.items():
            setattr(patient, key, value)

        if fields.medical_history is not None:
            patient.medical_history = [entry.model_dump() for entry in fields.medical_history]
        if fields.health_metrics is not None:
            patient.health_metrics = merge_health_metrics(
                patient.health_metrics, fields.health_metrics
            )

        await self.db.commit()
        await self.db.refresh(patient)

        logger.info(f"Updated patient {patient.id} fields: {sorted(fields.model_fields_set)}")
        return patient

    async def delete(self, patient_id: str) -> None:
        """Delete one patient."""
        result = await self.db.execute(delete(Patient).where(Patient.id == patient_id))
        if result.rowcount == 0:
            await self.db.rollback()
            raise RecordNotFoundError("Patient", patient_id)

        await self.db.commit()
        logger.info(f"Deleted patient {patient_id}")
