"""Patient model for medical records."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from carelink.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Patient(Base):
    """
    Patient medical record.

    `id` matches the owning account id when the record was created by the
    patient themselves; provider-created records get a fresh UUID.
    """

    __tablename__ = "patients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    patient_unique_id: Mapped[str | None] = mapped_column(String(20), unique=True)

    # Contact
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), index=True)
    phone: Mapped[str | None] = mapped_column(String(50), index=True)

    # Medical
    blood_type: Mapped[str | None] = mapped_column(String(5))
    allergies: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    medical_history: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, default=list, nullable=False
    )
    health_metrics: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    last_checkup: Mapped[str | None] = mapped_column(String(30))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Patient {self.id}: {self.name}>"
