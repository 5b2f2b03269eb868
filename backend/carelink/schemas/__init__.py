"""Pydantic schemas for API request/response validation."""

from carelink.schemas.emergency import (
    BulkDeleteRequest,
    BulkDeleteResult,
    EmergenciesResponse,
    EmergencyCreate,
    EmergencyOut,
    EmergencyStatusUpdate,
)
from carelink.schemas.patient import (
    HealthMetrics,
    HealthMetricsUpdate,
    MedicalHistoryEntry,
    PatientCreate,
    PatientFieldsUpdate,
    PatientOut,
    PatientRecord,
)
from carelink.schemas.session import RouteDecisionOut, SessionOut

__all__ = [
    "BulkDeleteRequest",
    "BulkDeleteResult",
    "EmergenciesResponse",
    "EmergencyCreate",
    "EmergencyOut",
    "EmergencyStatusUpdate",
    "HealthMetrics",
    "HealthMetricsUpdate",
    "MedicalHistoryEntry",
    "PatientCreate",
    "PatientFieldsUpdate",
    "PatientOut",
    "PatientRecord",
    "RouteDecisionOut",
    "SessionOut",
]
