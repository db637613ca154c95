import os
import tempfile

# Settings are read at import time, so the environment has to be ready first.
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f"bizdir-test-{os.getpid()}.db")
if os.path.exists(TEST_DB_PATH):
    os.remove(TEST_DB_PATH)
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["CACHE_TYPE"] = "inmemory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GOOGLE_PLACES_API_KEY"] = "test-key"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "bizdir-test-logs"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from bizdir.core.dependencies import get_cache, get_places_client
from bizdir.db import Base
from bizdir.services.business_store import BusinessStore
from bizdir.services.places_aggregator import PlacesAggregator
from bizdir.utils.caching import Cache
from fakes import FakeClock, FakePlacesClient
from main import app


def pytest_sessionfinish(session, exitstatus):
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return Cache(cache_type="inmemory", default_ttl=3600, clock=clock)


@pytest.fixture
def places():
    return FakePlacesClient()


@pytest.fixture
async def db_session(tmp_path):
    """A session on a fresh SQLite file per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'store.db'}", poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def store(db_session):
    return BusinessStore(db_session)


@pytest.fixture
def aggregator(store, cache, places):
    return PlacesAggregator(store=store, cache=cache, places=places)


@pytest.fixture
def client(cache, places):
    """TestClient with the places provider and cache swapped for fakes."""
    app.dependency_overrides[get_places_client] = lambda: places
    app.dependency_overrides[get_cache] = lambda: cache
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
