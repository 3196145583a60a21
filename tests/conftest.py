"""
Test configuration and fixtures.
This centralizes all test setup, making individual tests clean.

Each test gets its own SQLite file (NullPool, so every asyncio.run() call
opens fresh connections on its own event loop), an in-memory cache and a
fake geolocation provider built on httpx.MockTransport.
"""

import asyncio
import os

# Keep the app's default engine away from the developer database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("CACHE_BACKEND", "memory")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from main import app
from shortlink_app.api.rate_limit import limiter
from shortlink_app.cache.strategies import InMemoryCache
from shortlink_app.database.connection import (
    create_session_factory,
    enable_sqlite_foreign_keys,
    init_db,
)
from shortlink_app.dependencies import get_analytics_service, get_url_service
from shortlink_app.geolocation.resolver import GeolocationResolver
from shortlink_app.services.analytics_service import AnalyticsService
from shortlink_app.services.short_code_strategies import HexShortCodeStrategy
from shortlink_app.services.url_service import URLService
from shortlink_app.storage.strategies import SQLAlchemyLinkStore, SQLAlchemyVisitStore


BASE_URL = "http://sho.rt"

# Canned provider answers, keyed by IP
GEO_RESPONSES = {
    "8.8.8.8": {
        "status": "success", "country": "United States", "countryCode": "US",
        "region": "NY", "regionName": "New York", "city": "New York", "zip": "10001",
        "lat": 40.0, "lon": -74.0, "timezone": "America/New_York",
        "isp": "Example ISP", "org": "Example Org", "as": "AS15169", "query": "8.8.8.8",
    },
    "1.1.1.1": {
        "status": "success", "country": "Canada", "countryCode": "CA",
        "region": "ON", "regionName": "Ontario", "city": "Ottawa", "zip": "K1A",
        "lat": 45.0, "lon": -75.0, "timezone": "America/Toronto",
        "isp": "Example ISP", "org": "Example Org", "as": "AS13335", "query": "1.1.1.1",
    },
}


class FakeGeolocationProvider:
    """httpx MockTransport handler that records every request it serves"""

    def __init__(self, responses=None):
        self.responses = dict(GEO_RESPONSES if responses is None else responses)
        self.requests = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ip = request.url.path.rsplit("/", 1)[-1]
        if ip not in self.responses:
            return httpx.Response(200, json={"status": "fail", "message": "reserved range", "query": ip})
        return httpx.Response(200, json=self.responses[ip])


@pytest.fixture(scope="function")
def session_factory(tmp_path):
    """
    Fresh database for each test.
    This ensures tests are isolated and don't affect each other.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    enable_sqlite_foreign_keys(engine)
    asyncio.run(init_db(engine))

    yield create_session_factory(engine)

    asyncio.run(engine.dispose())


@pytest.fixture
def link_store(session_factory):
    return SQLAlchemyLinkStore(session_factory)


@pytest.fixture
def visit_store(session_factory):
    return SQLAlchemyVisitStore(session_factory)


@pytest.fixture
def geo_provider():
    return FakeGeolocationProvider()


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def resolver(cache, geo_provider):
    return GeolocationResolver(
        cache=cache,
        api_url="http://geo.test/json",
        timeout=3.0,
        transport=httpx.MockTransport(geo_provider),
    )


@pytest.fixture
def url_service(link_store, visit_store):
    return URLService(
        link_store=link_store,
        visit_store=visit_store,
        short_code_strategy=HexShortCodeStrategy(num_bytes=3),
        base_url=BASE_URL,
        max_retries=5,
    )


@pytest.fixture
def analytics_service(link_store, visit_store, resolver):
    return AnalyticsService(
        link_store=link_store,
        visit_store=visit_store,
        resolver=resolver,
    )


@pytest.fixture(scope="function")
def client(url_service, analytics_service):
    """
    Test client with the services overridden.
    This is the main fixture that API tests will use.
    """
    app.dependency_overrides[get_url_service] = lambda: url_service
    app.dependency_overrides[get_analytics_service] = lambda: analytics_service
    # Throttle counters live in process memory
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    limiter.reset()
