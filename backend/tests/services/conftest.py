"""Service test fixtures — async DB, FastAPI test client, fake providers, members.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - db_manager patched so readiness probes see the test engine
    - Provider clients (Anthropic, Resend, Twilio) replaced by recording fakes;
      no test ever reaches a network

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (ADR: PostgreSQL-specific features not exercised here)
    - Fakes overridden through app.dependency_overrides, the same seam the
      routes use to obtain the real singletons
    - Tokens minted with PyJWT against the test secret: exercises the real
      auth dependency end to end
"""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import ministry.infrastructure.database as db_module
from ministry.api.dependencies import (
    get_anthropic_client, get_email_client, get_sms_client,
)
from ministry.config import get_settings
from ministry.db.base import Base
from ministry.infrastructure.database import DatabaseSessionManager, get_db
from ministry.main import app
from ministry.models.member import Member
from tests.services.fakes import FakeEmail, FakeLLM, FakeSms


# -- Database ------------------------------------------------------------------


@pytest.fixture
async def test_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


# -- Providers -----------------------------------------------------------------


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_email():
    return FakeEmail()


@pytest.fixture
def fake_sms():
    return FakeSms()


@pytest.fixture
async def client(test_engine, test_session_factory, fake_llm, fake_email, fake_sms):
    """FastAPI test client with DB and provider dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_anthropic_client] = lambda: fake_llm
    app.dependency_overrides[get_email_client] = lambda: fake_email
    app.dependency_overrides[get_sms_client] = lambda: fake_sms

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# -- Members & auth ------------------------------------------------------------


@pytest.fixture
def make_member(test_db):
    """Async factory: await make_member(role="staff", tier="partner", ...)."""
    async def _make(role="member", tier="free", **fields):
        suffix = uuid.uuid4().hex[:8]
        member = Member(
            user_id=fields.pop("user_id", f"user-{suffix}"),
            email=fields.pop("email", f"{suffix}@example.org"),
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", suffix),
            role=role,
            tier=tier,
            **fields,
        )
        test_db.add(member)
        await test_db.commit()
        await test_db.refresh(member)
        return member
    return _make


@pytest.fixture
async def member(make_member):
    return await make_member()


@pytest.fixture
async def staff(make_member):
    return await make_member(role="staff")


@pytest.fixture
async def admin(make_member):
    return await make_member(role="admin")


@pytest.fixture
def cron_headers():
    return {"Authorization": f"Bearer {get_settings().cron_secret}"}
