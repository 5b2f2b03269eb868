"""Services for data access, deduplication and notifications."""

from carelink.services.deduplication import deduplicate
from carelink.services.emergency_feed import EmergencyFeed
from carelink.services.emergency_store import EmergencyStore
from carelink.services.notifications import NotificationClient
from carelink.services.patient_store import PatientStore

__all__ = [
    "EmergencyFeed",
    "EmergencyStore",
    "NotificationClient",
    "PatientStore",
    "deduplicate",
]
