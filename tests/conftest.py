"""Shared test fixtures.

Settings are read at import time, so the environment is set before anything
from `app` is imported. Every test gets its own in-memory SQLite database.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["ENV"] = "test"

from datetime import UTC, date, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from app.core.db import get_session  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app  # noqa: E402
from app.models.doctor import Doctor  # noqa: E402
from app.models.patient import Patient  # noqa: E402
from app.models.user import UserCreate  # noqa: E402
from app.services.auth_service import create_user  # noqa: E402
from app.services.slot_allocator import WEEKDAYS  # noqa: E402

ALL_DAYS = list(WEEKDAYS)


def utc_today() -> date:
    return datetime.now(UTC).date()


def next_weekday(name: str) -> date:
    """The next date strictly after today (UTC) that falls on `name`."""
    today = utc_today()
    offset = (WEEKDAYS.index(name) - today.weekday()) % 7 or 7
    return today + timedelta(days=offset)


@pytest.fixture
def future_date():
    """Factory for a future date on a given weekday (default: any day after today)."""

    def _future(weekday: str | None = None) -> date:
        return next_weekday(weekday) if weekday else utc_today() + timedelta(days=7)

    return _future


@pytest_asyncio.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_maker):
    """Create a staff user and return (user, auth headers)."""

    async def _make(role: str = "admin", email: str | None = None, password: str = "secret-pass-1"):
        async with session_maker() as s:
            user = await create_user(
                s,
                UserCreate(email=email or f"{role}@hospital.org", password=password, full_name=role.title(), role=role),
            )
            await s.commit()
        token = create_access_token(user.id, user.role)
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest_asyncio.fixture
async def admin_headers(make_user) -> dict[str, str]:
    _, headers = await make_user("admin")
    return headers


@pytest_asyncio.fixture
async def reception_headers(make_user) -> dict[str, str]:
    _, headers = await make_user("reception")
    return headers


@pytest.fixture
def make_doctor(session_maker):
    async def _make(
        name: str = "Dr. Meera Rao",
        days: list[str] | None = None,
        windows: list[str] | None = None,
        department: str | None = "Cardiology",
    ) -> Doctor:
        async with session_maker() as s:
            doctor = Doctor(
                name=name,
                department=department,
                available_days=ALL_DAYS if days is None else days,
                available_time=["9:00 AM - 9:30 AM"] if windows is None else windows,
            )
            s.add(doctor)
            await s.commit()
            await s.refresh(doctor)
        return doctor

    return _make


@pytest.fixture
def make_patient(session_maker):
    async def _make(name: str = "Arjun Nair") -> Patient:
        async with session_maker() as s:
            patient = Patient(name=name, age=42, gender="male", phone="555-0100", place="Kochi")
            s.add(patient)
            await s.commit()
            await s.refresh(patient)
        return patient

    return _make


@pytest.fixture
def new_patient_payload() -> dict:
    return {"name": "Lena Fischer", "age": 31, "gender": "female", "phone": "555-0199"}

