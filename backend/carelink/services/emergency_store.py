"""Data-access service for emergency reports."""

import logging
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carelink.config import get_settings
from carelink.models import Emergency
from carelink.schemas.emergency import EmergencyCreate, EmergencyStatus
from carelink.services.errors import InvalidEmergencyError, RecordNotFoundError

logger = logging.getLogger(__name__)
settings = get_settings()

# Reports from the one-tap crisis button use this reporter name and are
# exempt from the test-report filter.
CRISIS_REPORTER_NAME = "emergency user"


def is_test_report(data: EmergencyCreate) -> bool:
    """Check whether a submission looks like a test rather than a real report."""
    fields = (data.location, data.description, data.reporter_name, data.emergency_type)
    looks_like_test = any(value and "test" in value.lower() for value in fields)
    if not looks_like_test:
        return False
    return (data.reporter_name or "").lower() != CRISIS_REPORTER_NAME


class EmergencyStore:
    """
    Create, read, update and delete emergency reports.

    Listing methods return rows newest first. Deduplication is left to the
    caller so the raw history stays available.
    """

    def __init__(self, db: AsyncSession, chunk_size: int | None = None):
        self.db = db
        self.chunk_size = chunk_size or settings.bulk_delete_chunk_size

    def _validate(self, data: EmergencyCreate) -> None:
        if is_test_report(data):
            raise InvalidEmergencyError(
                "Test reports are not allowed. Please submit real emergency information."
            )
        if not data.emergency_type or not data.location or not data.reporter_name:
            raise InvalidEmergencyError(
                "Emergency type, location, and reporter name are required fields."
            )

    async def create(self, data: EmergencyCreate, user_id: str | None = None) -> Emergency:
        """Insert a new emergency report with status `pending`."""
        self._validate(data)

        emergency = Emergency(
            emergency_type=data.emergency_type,
            reporter_name=data.reporter_name,
            contact_number=data.contact_number or "",
            location=data.location,
            description=data.description or "",
            latitude=data.latitude,
            longitude=data.longitude,
            requires_ambulance=data.requires_ambulance,
            status="pending",
            user_id=user_id,
            patient_unique_id=data.patient_unique_id,
        )
        self.db.add(emergency)
        await self.db.commit()
        await self.db.refresh(emergency)

        logger.info(f"Created emergency {emergency.id} ({emergency.emergency_type})")
        return emergency

    async def list_all(self) -> list[Emergency]:
        """All emergencies, newest first."""
        result = await self.db.execute(
            select(Emergency).order_by(Emergency.created_at.desc(), Emergency.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_user(self, user_id: str) -> list[Emergency]:
        """Emergencies submitted by one account, newest first."""
        if not user_id:
            logger.warning("list_for_user called with empty user_id")
            return []

        result = await self.db.execute(
            select(Emergency)
            .where(Emergency.user_id == user_id)
            .order_by(Emergency.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_patient(self, patient_unique_id: str) -> list[Emergency]:
        """Emergencies linked to a patient id, newest first."""
        if not patient_unique_id:
            logger.warning("list_for_patient called with empty patient id")
            return []

        result = await self.db.execute(
            select(Emergency)
            .where(Emergency.patient_unique_id == patient_unique_id)
            .order_by(Emergency.created_at.desc())
        )
        return list(result.scalars().all())

    async def get(self, emergency_id: str) -> Emergency | None:
        return await self.db.get(Emergency, emergency_id)

    async def update_status(self, emergency_id: str, status: EmergencyStatus) -> Emergency:
        """Set the status of one emergency."""
        emergency = await self.get(emergency_id)
        if emergency is None:
            raise RecordNotFoundError("Emergency", emergency_id)

        emergency.status = status
        await self.db.commit()
        await self.db.refresh(emergency)

        logger.info(f"Emergency {emergency_id} status -> {status}")
        return emergency

    async def delete(self, emergency_id: str) -> None:
        """Delete one emergency."""
        result = await self.db.execute(delete(Emergency).where(Emergency.id == emergency_id))
        if result.rowcount == 0:
            await self.db.rollback()
            raise RecordNotFoundError("Emergency", emergency_id)

        await self.db.commit()
        logger.info(f"Deleted emergency {emergency_id}")

    async def delete_many(self, ids: list[str]) -> tuple[int, list[str]]:
        """
        Delete emergencies in chunks.

        A failing chunk does not stop the remaining chunks.

        Returns:
            Tuple of (number of rows deleted, ids from chunks that failed)
        """
        deleted = 0
        failed_ids: list[str] = []

        for start in range(0, len(ids), self.chunk_size):
            chunk = ids[start : start + self.chunk_size]
            chunk_number = start // self.chunk_size + 1
            try:
                result = await self.db.execute(delete(Emergency).where(Emergency.id.in_(chunk)))
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Failed to delete chunk {chunk_number}: {e}")
                failed_ids.extend(chunk)
                continue

            deleted += result.rowcount or 0
            logger.debug(f"Deleted {result.rowcount} emergencies in chunk {chunk_number}")

        if failed_ids:
            logger.error(f"Failed to delete {len(failed_ids)} emergencies ({deleted} deleted)")
        else:
            logger.info(f"Deleted {deleted} emergencies")

        return deleted, failed_ids

    async def change_fingerprint(self) -> tuple[int, datetime | None]:
        """Row count and latest update time, used to notice out-of-band writes."""
        result = await self.db.execute(
            select(func.count(Emergency.id), func.max(Emergency.updated_at))
        )
        count, latest = result.one()
        return count or 0, latest
