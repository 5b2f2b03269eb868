"""Exceptions raised by the data-access services."""


class StoreError(Exception):
    """Base exception for emergency and patient store errors."""

    pass


class InvalidEmergencyError(StoreError):
    """Emergency submission failed validation."""

    pass


class InvalidPatientError(StoreError):
    """Patient payload failed validation."""

    pass


class DuplicatePatientError(StoreError):
    """A patient with the same email or phone already exists."""

    pass


class RecordNotFoundError(StoreError):
    """The requested record does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id
