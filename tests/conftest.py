import os

# must be set before the app (and its settings) are imported
os.environ.setdefault("TELEMETRY_ENABLED", "false")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from allocation.api.deps import get_directory, get_rule_engine
from allocation.core.db import build_engine, get_db
from allocation.main import app
from allocation.models import Base
from allocation.services.rental_rules import RentalRuleEngine, RentalRulesConfig

from tests.fakes import FakeDirectory


def _test_db_url(tmp_path) -> str:
    url = os.getenv("DATABASE_URL_TEST")
    if url:
        return url
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    engine = build_engine(_test_db_url(tmp_path))
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine):
    """
    Transactional rollback per test:
    - Start an outer transaction on a dedicated connection
    - Bind the session with join_transaction_mode="create_savepoint" so that
      session commits/rollbacks only touch SAVEPOINTs inside it
    - Roll the outer transaction back at the end
    """
    async with async_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False, join_transaction_mode="create_savepoint")
        try:
            yield session
        finally:
            await session.close()
            await trans.rollback()


@pytest.fixture
def rules_config() -> RentalRulesConfig:
    return RentalRulesConfig(
        property_codes=frozenset({"24104", "23002", "23003"}),
        residential_area_codes=frozenset({"CEN", "OXB"}),
    )


@pytest.fixture
def rule_engine(rules_config) -> RentalRuleEngine:
    return RentalRuleEngine(rules_config)


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, directory: FakeDirectory, rule_engine: RentalRuleEngine):
    """
    HTTP client that uses the test DB session and fake registry via dependency override.
    """
    async def _override_get_db():
        yield db_session

    async def _override_get_directory():
        yield directory

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_directory] = _override_get_directory
    app.dependency_overrides[get_rule_engine] = lambda: rule_engine

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
