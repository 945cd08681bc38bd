"""
Pytest configuration and shared fixtures for backend tests.
"""

import sys
from pathlib import Path

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from typing import AsyncGenerator, Callable
from uuid import uuid4

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import after path is set
from infrastructure.database.models import Analyst, AnalystCoveredTopic, Base, User, UserRole
from infrastructure.database.connection import get_db
from core.security import PasswordHasher, TokenService
from infrastructure.config import get_settings

# Low bcrypt cost keeps the suite fast
password_hasher = PasswordHasher(rounds=4)
settings = get_settings()
token_service = TokenService(
    secret_key=settings.jwt_secret_key,
    algorithm=settings.jwt_algorithm,
)

TEST_PASSWORD = "testpassword123"

# Database URL for testing (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


async def _create_user(db: AsyncSession, email: str, name: str, role: str) -> User:
    user = User(
        id=str(uuid4()),
        email=email,
        password_hash=password_hasher.hash(TEST_PASSWORD),
        name=name,
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def headers_for(user: User) -> dict:
    """Bearer headers for ``user``."""
    access_token = token_service.create_access_token(
        user_id=user.id, email=user.email, role=user.role
    )
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create an admin test user."""
    return await _create_user(db_session, "test@example.com", "Test User", UserRole.ADMIN.value)


@pytest.fixture
async def editor_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "editor@example.com", "Editor User", UserRole.EDITOR.value)


@pytest.fixture
async def portal_user(db_session: AsyncSession) -> User:
    """Analyst-portal account; its email matches the ``analyst`` fixture."""
    return await _create_user(
        db_session, "jane.doe@researchco.com", "Jane Doe", UserRole.ANALYST.value
    )


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for the admin test user."""
    return headers_for(test_user)


@pytest.fixture
def editor_headers(editor_user: User) -> dict:
    return headers_for(editor_user)


@pytest.fixture
def make_analyst(db_session: AsyncSession) -> Callable:
    """Factory creating analysts directly in the database."""

    async def _make(**overrides) -> Analyst:
        topics = overrides.pop("topics", [])
        fields = {
            "first_name": "Jane",
            "last_name": "Doe",
            "email": f"analyst-{uuid4().hex[:8]}@researchco.com",
            "company": "Research Co",
        }
        fields.update(overrides)
        analyst = Analyst(**fields)
        analyst.covered_topics = [AnalystCoveredTopic(topic=t) for t in topics]
        db_session.add(analyst)
        await db_session.commit()
        await db_session.refresh(analyst)
        return analyst

    return _make


@pytest.fixture
async def analyst(make_analyst) -> Analyst:
    return await make_analyst(
        email="jane.doe@researchco.com",
        title="VP Research",
        topics=["HR Tech", "Payroll"],
    )


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    # Import app here to avoid circular imports
    from main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    # Reset rate limiter state between tests to prevent cross-test 429s
    app.state.limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
