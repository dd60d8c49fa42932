# tests/conftest.py
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.adapters.clients.http_resilience import reset_circuit
from app.models import Base
from app.service_layer.weights import WeightConfigStore


@pytest.fixture
async def engine():
    """
    One private in-memory database per test. StaticPool keeps every session
    on the same connection, otherwise each would see an empty :memory: db.
    """
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
def weight_store(async_session_maker):
    return WeightConfigStore(async_session_maker)


@pytest.fixture(autouse=True)
def _fresh_http_state():
    # circuits and pacing are process-wide
    reset_circuit()
    yield
    reset_circuit()
