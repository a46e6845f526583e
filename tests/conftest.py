"""Pytest configuration and fixtures."""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.core.redis import SlotCache, get_slot_cache
from app.db.session import get_session
from app.main import app
from app.scheduling.weekly_schedule import default_weekly_schedule
from app.schemas.schedule import WeeklySchedule



class FakeRedis:
    """The handful of redis.asyncio calls SlotCache makes, kept in a dict."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.ttls[key] = ex

    async def scan_iter(self, match=None):
        prefix = (match or "").rstrip("*")
        for key in list(self.data):
            if key.startswith(prefix):
                yield key

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)

    async def close(self):
        pass


class BrokenRedis(FakeRedis):
    async def get(self, key):
        raise RedisConnectionError("connection refused")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("connection refused")


@pytest.fixture
def clinician_id():
    return uuid4()


@pytest.fixture
def weekly_schedule() -> WeeklySchedule:
    """Mon-Fri 09:00-17:00, 12:00-13:00 break, 10 minute buffer."""
    return default_weekly_schedule().model_copy(update={"buffer_minutes": 10})


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def slot_cache(fake_redis) -> SlotCache:
    cache = SlotCache()
    cache.redis = fake_redis
    return cache


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, slot_cache):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_slot_cache] = lambda: slot_cache

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def broken_slot_cache() -> SlotCache:
    cache = SlotCache()
    cache.redis = BrokenRedis()
    return cache
