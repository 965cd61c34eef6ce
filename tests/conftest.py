# tests/conftest.py

import os

# Settings are read at import time
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("JWT_SECRET", "vetblood-test-secret-0123456789abcdef")

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.common.database.database import init_db
from src.models.models import (
    User, Donor, Clinic, Patient,
    UserRole, UrgencyLevel, RequestStatus
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fetch(session_factory):
    """Read a row in a separate session, so the result reflects what was committed."""
    async def _fetch(model, record_id):
        async with session_factory() as other:
            return await other.get(model, record_id)
    return _fetch


class Factory:
    """Creates users with their role profile and commits them."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _user(self, role: UserRole, first_name: str) -> User:
        return User(
            id=uuid4(),
            email=f"{first_name.lower()}-{uuid4().hex[:8]}@test.com",
            role=role,
            first_name=first_name,
            last_name="Tester",
            is_active=True
        )

    async def _save(self, profile):
        self.session.add(profile)
        await self.session.commit()
        return profile

    async def clinic(self, name="Riverside Animal Hospital", city="Austin", **overrides) -> Clinic:
        return await self._save(Clinic(
            id=uuid4(),
            user=self._user(UserRole.CLINIC, "Dana"),
            name=name,
            city=city,
            is_verified=True,
            **overrides
        ))

    async def donor(self, dog_name="Bruno", **overrides) -> Donor:
        values = dict(
            breed="Greyhound",
            city="Austin",
            blood_type="DEA 1.1+",
            weight_kg=32.0,
            last_donation=None,
            is_medical_condition=False,
            donation_count=0,
        )
        values.update(overrides)
        return await self._save(Donor(
            id=uuid4(),
            user=self._user(UserRole.DONOR, "Sam"),
            dog_name=dog_name,
            **values
        ))

    async def patient(self, dog_name="Luna", **overrides) -> Patient:
        values = dict(
            breed="Border Collie",
            city="Austin",
            blood_type="DEA 1.1+",
            weight_kg=18.0,
            urgency=UrgencyLevel.IMMEDIATE,
            request_status=RequestStatus.PENDING,
            pending_matches=0,
            confirmed_matches=0,
        )
        values.update(overrides)
        return await self._save(Patient(
            id=uuid4(),
            user=self._user(UserRole.PATIENT, "Maria"),
            dog_name=dog_name,
            **values
        ))


@pytest.fixture
def factory(session):
    return Factory(session)
