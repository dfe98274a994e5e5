"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.security import create_access_token, hash_password
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.user import User, UserRole

# Use SQLite for testing (simpler than spinning up postgres)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "testpassword123"
# Hash once; bcrypt is deliberately slow
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture(scope="function")
async def async_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
async def client(async_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create HTTP test client with overridden dependencies.

    Runs the app in the test's event loop so it can share the session.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def make_user(session: AsyncSession, email: str, role: UserRole, **fields) -> User:
    """Persist a user with the shared test password."""
    user = User(
        email=email,
        hashed_password=TEST_PASSWORD_HASH,
        role=role.value,
        first_name=fields.pop("first_name", "Test"),
        last_name=fields.pop("last_name", role.value.title()),
        is_active=fields.pop("is_active", True),
        **fields,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def patient_user(async_session: AsyncSession) -> User:
    """Create a test patient."""
    return await make_user(async_session, "patient@carebridge.local", UserRole.PATIENT)


@pytest.fixture
async def other_patient(async_session: AsyncSession) -> User:
    """Create a second patient for ownership checks."""
    return await make_user(
        async_session, "other.patient@carebridge.local", UserRole.PATIENT, first_name="Other"
    )


@pytest.fixture
async def doctor_user(async_session: AsyncSession) -> User:
    """Create a verified test doctor."""
    return await make_user(
        async_session,
        "doctor@carebridge.local",
        UserRole.DOCTOR,
        first_name="Dr Test",
        specialization="General Practice",
        is_verified=True,
    )


@pytest.fixture
async def admin_user(async_session: AsyncSession) -> User:
    """Create a test admin user."""
    return await make_user(async_session, "admin@carebridge.local", UserRole.ADMIN)


def create_test_token(user: User) -> str:
    """Create a test JWT token for a user."""
    return create_access_token(subject=user.id, additional_claims={"role": user.role})


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_test_token(user)}"}


@pytest.fixture
def patient_headers(patient_user: User) -> dict[str, str]:
    """Create authorization headers for the patient."""
    return bearer(patient_user)


@pytest.fixture
def other_patient_headers(other_patient: User) -> dict[str, str]:
    return bearer(other_patient)


@pytest.fixture
def doctor_headers(doctor_user: User) -> dict[str, str]:
    """Create authorization headers for the doctor."""
    return bearer(doctor_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    """Create authorization headers for admin user."""
    return bearer(admin_user)


@pytest.fixture
def user_factory(async_session: AsyncSession):
    """Create extra users inside a test."""

    async def factory(email: str, role: UserRole, **fields) -> User:
        return await make_user(async_session, email, role, **fields)

    return factory


@pytest.fixture
def auth_for():
    """Build authorization headers for any user."""
    return bearer
