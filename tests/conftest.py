# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- fakeredis-backed async clients (no real Redis server needed)
- A patched client factory so owned connections are built on fakeredis
- RedisConnection instances in owned and adopted-client modes
"""

import asyncio
import os

import fakeredis
import pytest

from kvcache.core.models import CacheKey
from kvcache.infrastructure.cache import RedisConnection, topology
from kvcache.utils.config import get_settings


class TrackingFakeRedis(fakeredis.FakeAsyncRedis):
    """FakeAsyncRedis that records closes and can delay its readiness probe."""

    ping_delay = 0.0

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.closed = False

    async def ping(self, **kwargs):
        if self.ping_delay:
            await asyncio.sleep(self.ping_delay)
        return await super().ping(**kwargs)

    async def aclose(self, *args, **kwargs):
        self.closed = True
        await super().aclose(*args, **kwargs)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Keep KVCACHE_* variables from the developer's shell out of the tests."""
    get_settings.cache_clear()
    for name in list(os.environ):
        if name.startswith("KVCACHE_"):
            monkeypatch.delenv(name)
    yield
    get_settings.cache_clear()


@pytest.fixture()
def fake_server():
    """A fresh in-memory Redis server per test."""
    return fakeredis.FakeServer()


@pytest.fixture()
def fake_redis(fake_server):
    """A FakeAsyncRedis client on the per-test server.

    Uses decode_responses=True to match the clients built by the backend.
    """
    return TrackingFakeRedis(server=fake_server, decode_responses=True)


@pytest.fixture()
def created_clients(monkeypatch, fake_server):
    """Replace the client factory with one that builds fakeredis clients.

    Returns the list of clients created, so tests can count connection
    attempts and inspect closes.
    """
    created = []

    def _build_clients(settings):
        client = TrackingFakeRedis(server=fake_server, decode_responses=True)
        created.append(client)
        return client, None

    monkeypatch.setattr(topology, "build_clients", _build_clients)
    return created


@pytest.fixture()
def connection(created_clients):
    """An owned RedisConnection (not yet started) backed by fakeredis."""
    return RedisConnection()


@pytest.fixture()
def key():
    """A typical cache key."""
    return CacheKey(segment="baz", id="bar")
