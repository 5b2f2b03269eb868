"""Pytest fixtures for CareLink backend tests."""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from carelink.config import get_settings
from carelink.database import Base, get_db
from carelink.limiter import limiter
from carelink.main import app
from carelink.models import Emergency
from carelink.schemas.emergency import EmergencyOut

# Test database URL - in-memory SQLite shared across one engine's connections
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BASE_TIME = datetime(2026, 1, 18, 10, 0, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


def make_token(user_id: str, role: str | None = None, expires_in: int = 3600, **extra: Any) -> str:
    """Mint an access token the way the identity provider would."""
    settings = get_settings()
    claims: dict[str, Any] = {
        "sub": user_id,
        "aud": settings.auth_jwt_audience,
        "exp": datetime.now(UTC) + timedelta(seconds=expires_in),
        "user_metadata": {"role": role} if role is not None else {},
    }
    claims.update(extra)
    return jwt.encode(claims, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)


@pytest.fixture
def provider_headers() -> dict[str, str]:
    """Authorization header for a healthcare provider."""
    return {"Authorization": f"Bearer {make_token('provider-1', 'Healthcare Provider')}"}


@pytest.fixture
def patient_headers() -> dict[str, str]:
    """Authorization header for a patient."""
    return {"Authorization": f"Bearer {make_token('patient-1', 'patient')}"}


@pytest.fixture
def make_report() -> Callable[..., EmergencyOut]:
    """Factory for emergency reports used by deduplication tests."""
    counter = iter(range(1, 10_000))

    def _make(offset_seconds: float | None = 0, **fields: Any) -> EmergencyOut:
        values: dict[str, Any] = {
            "id": f"em-{next(counter)}",
            "emergency_type": "Medical Emergency",
            "reporter_name": "Asha",
            "location": "MG Road",
            "description": "",
            "status": "pending",
            "created_at": (
                BASE_TIME + timedelta(seconds=offset_seconds)
                if offset_seconds is not None
                else None
            ),
        }
        values.update(fields)
        return EmergencyOut(**values)

    return _make


@pytest.fixture
def sample_emergency_payload() -> dict[str, Any]:
    """Valid emergency submission."""
    return {
        "emergency_type": "Medical Emergency",
        "reporter_name": "Asha Rao",
        "contact_number": "+91 98450 12345",
        "location": "MG Road, Bengaluru",
        "description": "Elderly man collapsed near the metro entrance",
        "latitude": 12.9756,
        "longitude": 77.6067,
        "requires_ambulance": True,
    }


@pytest_asyncio.fixture
async def seeded_emergencies(db_session: AsyncSession) -> list[Emergency]:
    """Three stored reports: a duplicate pair and one unrelated incident."""
    rows = [
        Emergency(
            id="a",
            emergency_type="Medical Emergency",
            reporter_name="Asha",
            location="MG Road",
            description="",
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        ),
        Emergency(
            id="b",
            emergency_type="Medical Emergency",
            reporter_name="Asha",
            location="MG Road",
            description="",
            created_at=BASE_TIME + timedelta(seconds=30),
            updated_at=BASE_TIME + timedelta(seconds=30),
        ),
        Emergency(
            id="c",
            emergency_type="Fire",
            reporter_name="Ravi",
            location="Park Street",
            description="",
            user_id="patient-1",
            patient_unique_id="PT-ABCD-1234",
            created_at=BASE_TIME + timedelta(seconds=10),
            updated_at=BASE_TIME + timedelta(seconds=10),
        ),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return rows
