"""Pytest fixtures for payroll reconciliation tests."""

from __future__ import annotations

import os

# Cheap hashes for tests; must be set before settings are first read
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from collections.abc import AsyncGenerator
from decimal import Decimal

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from payroll_recon.api.app import create_app
from payroll_recon.api.dependencies import get_db_session
from payroll_recon.config import get_settings
from payroll_recon.models import AppUser, Base, UserRole
from payroll_recon.services.actor import Actor
from payroll_recon.services.user_service import UserService

get_settings.cache_clear()

# Use in-memory SQLite for tests (with async support)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_PASSWORD = "admin-secret"
EMPLOYER_PASSWORD = "employer-secret"
EMPLOYEE_PASSWORD = "employee-secret"


@pytest.fixture
async def engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# ============================================================================
# Users
# ============================================================================


@pytest.fixture
async def admin_user(session) -> AppUser:
    user = await UserService(session).create_user(
        email="admin@example.com",
        name="Avery Admin",
        password=ADMIN_PASSWORD,
        role=UserRole.ADMIN,
    )
    await session.commit()
    return user


@pytest.fixture
async def employer_user(session) -> AppUser:
    user = await UserService(session).create_user(
        email="employer@example.com",
        name="Eden Employer",
        password=EMPLOYER_PASSWORD,
        role=UserRole.EMPLOYER,
    )
    await session.commit()
    return user


@pytest.fixture
async def employee_user(session, employer_user) -> AppUser:
    user = await UserService(session).create_user(
        email="worker@example.com",
        name="Wren Worker",
        password=EMPLOYEE_PASSWORD,
        role=UserRole.EMPLOYEE,
        employer_id=employer_user.user_id,
        hourly_rate=Decimal("25.00"),
    )
    await session.commit()
    return user


@pytest.fixture
async def other_employee_user(session, employer_user) -> AppUser:
    user = await UserService(session).create_user(
        email="second.worker@example.com",
        name="Sam Second",
        password=EMPLOYEE_PASSWORD,
        role=UserRole.EMPLOYEE,
        employer_id=employer_user.user_id,
    )
    await session.commit()
    return user


@pytest.fixture
def admin(admin_user) -> Actor:
    return Actor.from_user(admin_user)


@pytest.fixture
def employer(employer_user) -> Actor:
    return Actor.from_user(employer_user)


@pytest.fixture
def employee(employee_user) -> Actor:
    return Actor.from_user(employee_user)


@pytest.fixture
def other_employee(other_employee_user) -> Actor:
    return Actor.from_user(other_employee_user)


# ============================================================================
# API
# ============================================================================


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client bound to the app with the test database."""
    app = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
