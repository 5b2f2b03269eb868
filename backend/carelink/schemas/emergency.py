"""Pydantic schemas for emergency reports."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

EmergencyStatus = Literal["pending", "in_progress", "completed"]


class EmergencyCreate(BaseModel):
    """Emergency submission payload."""

    emergency_type: str | None = Field(None, max_length=100)
    reporter_name: str | None = Field(None, max_length=255)
    contact_number: str | None = Field(None, max_length=50)
    location: str | None = Field(None, max_length=500)
    description: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    requires_ambulance: bool = False
    patient_unique_id: str | None = Field(None, max_length=20)


class EmergencyOut(BaseModel):
    """Emergency report response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    emergency_type: str
    reporter_name: str | None = None
    contact_number: str | None = None
    location: str | None = None
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    requires_ambulance: bool = False
    status: EmergencyStatus = "pending"
    user_id: str | None = None
    patient_unique_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EmergenciesResponse(BaseModel):
    """List of emergencies with deduplication stats."""

    emergencies: list[EmergencyOut]
    total: int
    duplicates_hidden: int = 0


class EmergencyStatusUpdate(BaseModel):
    """Status change for a single emergency."""

    status: EmergencyStatus


class BulkDeleteRequest(BaseModel):
    """Ids of emergencies to delete."""

    ids: list[str] = Field(..., min_length=1)


class BulkDeleteResult(BaseModel):
    """Outcome of a chunked bulk delete."""

    deleted: int
    failed_ids: list[str] = []
    message: str
