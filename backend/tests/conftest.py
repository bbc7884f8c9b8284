"""
Pytest configuration and shared fixtures for backend tests.
"""

import sys
from pathlib import Path

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from datetime import UTC, datetime, timedelta
from typing import AsyncGenerator, Callable
from uuid import uuid4

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import after path is set
from api.dependencies import get_token_service
from infrastructure.database.models import (
    Article,
    ArticleStatus,
    ArticleTag,
    Base,
    Plan,
    Publisher,
    User,
    UserRole,
)
from infrastructure.database.connection import get_db

token_service = get_token_service()


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

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
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


def make_auth_headers(email: str, **claims) -> dict:
    """Bearer header for an arbitrary identity."""
    access_token = token_service.create_access_token(email, **claims)
    return {"Authorization": f"Bearer {access_token}"}


async def _add_user(db_session: AsyncSession, **fields) -> User:
    user = User(id=str(uuid4()), **fields)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Regular user without a subscription."""
    return await _add_user(
        db_session,
        email="test@example.com",
        name="Test User",
        photo="https://img.example.com/test.png",
        role=UserRole.USER.value,
        has_subscription=False,
    )


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user."""
    return make_auth_headers(test_user.email, name=test_user.name)


@pytest.fixture
def headers_for() -> Callable[..., dict]:
    """Factory for bearer headers of any email."""
    return make_auth_headers


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _add_user(
        db_session,
        email="admin@example.com",
        name="Admin User",
        role=UserRole.ADMIN.value,
        has_subscription=False,
    )


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return make_auth_headers(admin_user.email)


@pytest.fixture
async def subscribed_user(db_session: AsyncSession) -> User:
    """User whose subscription window is still open."""
    return await _add_user(
        db_session,
        email="subscribed@example.com",
        name="Subscribed User",
        role=UserRole.USER.value,
        has_subscription=True,
        subscription_end=datetime.now(UTC) + timedelta(days=30),
    )


@pytest.fixture
def subscribed_headers(subscribed_user: User) -> dict:
    return make_auth_headers(subscribed_user.email)


@pytest.fixture
async def expired_user(db_session: AsyncSession) -> User:
    """User still flagged as subscribed although the window has lapsed."""
    return await _add_user(
        db_session,
        email="expired@example.com",
        name="Expired User",
        role=UserRole.USER.value,
        has_subscription=True,
        subscription_end=datetime.now(UTC) - timedelta(minutes=5),
    )


@pytest.fixture
def expired_headers(expired_user: User) -> dict:
    return make_auth_headers(expired_user.email)


@pytest.fixture
async def publisher(db_session: AsyncSession) -> Publisher:
    pub = Publisher(id=str(uuid4()), name="Daily Planet", logo="https://img.example.com/dp.png")
    db_session.add(pub)
    await db_session.commit()
    await db_session.refresh(pub)
    return pub


@pytest.fixture
async def plan(db_session: AsyncSession) -> Plan:
    monthly = Plan(
        id=str(uuid4()),
        name="Premium",
        price=9.99,
        duration=1,
        duration_unit="months",
        description="One month of premium articles",
    )
    db_session.add(monthly)
    await db_session.commit()
    await db_session.refresh(monthly)
    return monthly


@pytest.fixture
def article_factory(db_session: AsyncSession, publisher: Publisher) -> Callable:
    """
    Build and persist articles.

    ``minutes_ago`` pins ``created_at`` so newest-first ordering is deterministic.
    """

    async def _create(
        title: str = "Test Article",
        author_email: str = "author@example.com",
        minutes_ago: int = 0,
        tags: tuple[str, ...] = ("news",),
        **fields,
    ) -> Article:
        created = datetime.now(UTC) - timedelta(minutes=minutes_ago)
        values = {
            "image": "https://img.example.com/a.png",
            "description": "A short description",
            "content": f"Body of {title}",
            "status": ArticleStatus.APPROVED.value,
            "is_premium": False,
            "views": 0,
            "ratings": [],
            "average_rating": 0.0,
        }
        values.update(fields)
        article = Article(
            id=str(uuid4()),
            title=title,
            publisher_id=publisher.id,
            author_email=author_email,
            author_name="Author",
            tags=[ArticleTag(value=t, label=t.title()) for t in tags],
            created_at=created,
            updated_at=created,
            **values,
        )
        db_session.add(article)
        await db_session.commit()
        await db_session.refresh(article)
        return article

    return _create


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
