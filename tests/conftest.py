"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.user import UserType
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, UserModel
from tests.unit.conftest import RecordingEmailSender


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed test users, one per role
ADMIN_USER = TokenUser(id=uuid4(), email="admin@example.com", display_name="Ada Admin")
OWNER_USER = TokenUser(id=uuid4(), email="owner@example.com", display_name="Olive Owner")
OTHER_OWNER_USER = TokenUser(id=uuid4(), email="other-owner@example.com", display_name="Otto Owner")
GUEST_USER = TokenUser(id=uuid4(), email="guest@example.com", display_name="Gus Guest")

SEEDED_USERS: dict[UUID, tuple[TokenUser, UserType]] = {
    ADMIN_USER.id: (ADMIN_USER, UserType.ADMIN),
    OWNER_USER.id: (OWNER_USER, UserType.OWNER),
    OTHER_OWNER_USER.id: (OTHER_OWNER_USER, UserType.OWNER),
    GUEST_USER.id: (GUEST_USER, UserType.USER),
}


@pytest.fixture(scope="session")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )
    yield engine
    await engine.dispose()


@pytest.fixture(scope="session")
async def setup_database(engine: AsyncEngine) -> AsyncGenerator[None, None]:
    """Create all tables once per session."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(scope="session")
async def session_factory(
    engine: AsyncEngine, setup_database: None
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create session factory with one row per seeded user."""
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with factory() as session:
        existing = set((await session.execute(select(UserModel.id))).scalars())
        for user, user_type in SEEDED_USERS.values():
            if user.id not in existing:
                session.add(
                    UserModel(
                        id=user.id,
                        email=user.email,
                        full_name=user.display_name,
                        user_type=user_type.value,
                    )
                )
        await session.commit()

    yield factory


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def test_user() -> TokenUser:
    """The default caller: an owner."""
    return OWNER_USER


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def headers_for(auth_provider: JWTAuthProvider) -> Callable[[TokenUser], dict[str, str]]:
    """Build bearer headers for any seeded user."""

    def _headers(user: TokenUser) -> dict[str, str]:
        return {"Authorization": f"Bearer {auth_provider.create_token(user)}"}

    return _headers


@pytest.fixture
def auth_headers(headers_for: Callable[[TokenUser], dict[str, str]], test_user: TokenUser) -> dict[str, str]:
    """Create authorization headers."""
    return headers_for(test_user)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    """Captures invitation emails sent during a test."""
    return RecordingEmailSender()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth, no database overrides)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def api_client(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
    email_sender: RecordingEmailSender,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client wired to the test database.

    This client:
    - Uses the in-memory SQLite database with seeded users
    - Validates real HS256 bearer tokens (see ``headers_for``)
    - Enlists through the demo booking provider
    - Records invitation emails instead of sending them
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        get_activity_service,
        get_invitation_service,
        get_property_service,
        get_trust_level_service,
    )
    from domain.services.activity_service import ActivityService
    from domain.services.invitation_service import InvitationService
    from domain.services.property_service import PropertyService
    from domain.services.trust_level_service import TrustLevelService
    from infrastructure.booking.demo_client import DemoBookingProvider
    from infrastructure.database.session import get_async_session
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    activity_service = ActivityService(test_uow_factory)

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_activity_service] = lambda: activity_service
    app.dependency_overrides[get_property_service] = lambda: PropertyService(
        test_uow_factory,
        booking_provider=DemoBookingProvider(),
        activity_service=activity_service,
    )
    app.dependency_overrides[get_invitation_service] = lambda: InvitationService(
        test_uow_factory,
        email_sender=email_sender,
        public_base_url="http://app.test",
        activity_service=activity_service,
    )
    app.dependency_overrides[get_trust_level_service] = lambda: TrustLevelService(
        test_uow_factory, activity_service=activity_service
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Any]:
    """Insert a fresh user of the given type and return its token identity."""

    async def _make(user_type: UserType = UserType.OWNER, name: str = "Test User") -> TokenUser:
        user = TokenUser(id=uuid4(), email=f"{uuid4().hex[:12]}@example.com", display_name=name)
        async with session_factory() as session:
            session.add(
                UserModel(
                    id=user.id,
                    email=user.email,
                    full_name=name,
                    user_type=user_type.value,
                )
            )
            await session.commit()
        return user

    return _make


@pytest.fixture
def make_active_property(
    api_client: AsyncClient,
    headers_for: Callable[[TokenUser], dict[str, str]],
) -> Callable[..., Any]:
    """Drive a new property through submit, approve and enlist."""

    async def _make(owner: TokenUser, **fields: Any) -> dict[str, Any]:
        body = {"title": "Lake house", "city": "Annecy", "price_per_night": "180.00", **fields}
        created = await api_client.post("/api/v1/properties", json=body, headers=headers_for(owner))
        assert created.status_code == 201, created.text
        property_id = created.json()["data"]["id"]

        admin = headers_for(ADMIN_USER)
        for path, headers in (
            (f"/api/v1/properties/{property_id}/submit", headers_for(owner)),
            (f"/api/v1/admin/properties/{property_id}/approve", admin),
            (f"/api/v1/admin/properties/{property_id}/enlist", admin),
        ):
            response = await api_client.post(path, headers=headers)
            assert response.status_code == 200, response.text

        return response.json()["data"]  # type: ignore[no-any-return]

    return _make
