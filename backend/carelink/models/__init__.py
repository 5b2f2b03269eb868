"""Database models."""

from carelink.models.emergency import Emergency
from carelink.models.patient import Patient

__all__ = [
    "Emergency",
    "Patient",
]
