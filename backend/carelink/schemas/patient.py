"""Pydantic schemas for patient records."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class HealthMetrics(BaseModel):
    """Latest vitals recorded for a patient."""

    blood_pressure: str = ""
    heart_rate: float = 0
    blood_sugar: float = 0
    oxygen_level: float = 0


class HealthMetricsUpdate(BaseModel):
    """Partial vitals; unset values keep what is stored."""

    blood_pressure: str | None = None
    heart_rate: float | None = None
    blood_sugar: float | None = None
    oxygen_level: float | None = None


class MedicalHistoryEntry(BaseModel):
    """One diagnosis/treatment entry."""

    date: str
    diagnosis: str
    treatment: str = ""
    doctor: str = ""


class PatientCreate(BaseModel):
    """Payload for creating a patient record."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field("", max_length=255)
    phone: str = Field("", max_length=50)
    blood_type: str = Field("", max_length=5)
    allergies: list[str] = []
    medical_history: list[MedicalHistoryEntry] = []
    health_metrics: HealthMetrics = Field(default_factory=HealthMetrics)
    last_checkup: str | None = Field(None, max_length=30)


class PatientRecord(PatientCreate):
    """Full patient record used for create-or-replace."""

    id: str


class PatientFieldsUpdate(BaseModel):
    """Partial patient update merged into the stored record."""

    name: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    blood_type: str | None = Field(None, max_length=5)
    allergies: list[str] | None = None
    medical_history: list[MedicalHistoryEntry] | None = None
    health_metrics: HealthMetricsUpdate | None = None
    last_checkup: str | None = Field(None, max_length=30)


class PatientOut(BaseModel):
    """Patient response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_unique_id: str | None = None
    name: str
    email: str | None = None
    phone: str | None = None
    blood_type: str | None = None
    allergies: list[str] = []
    medical_history: list[MedicalHistoryEntry] = []
    health_metrics: HealthMetrics = Field(default_factory=HealthMetrics)
    last_checkup: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
