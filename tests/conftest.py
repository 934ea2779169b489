"""Shared fixtures: an in-memory Redis with a controllable clock and a stub catalog API."""

import fnmatch
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from src.cache.connection import RedisCache
from src.cache.manager import CacheManager
from src.catalog.client import CatalogAPIClient
from src.catalog.service import CatalogDataService
from src.catalog.settings import CatalogSettings

API_URL = "http://catalog.test/api"


class FakeClock:
    """Manually advanced clock used for TTL expiry."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """
    Minimal async stand-in for redis.asyncio.Redis.

    Supports GET, SET with EX, DEL, KEYS and PING, with expiry evaluated
    against an injectable clock. Every call is recorded in ``calls``.
    """

    def __init__(self, clock: Optional[FakeClock] = None) -> None:
        self.clock = clock or FakeClock()
        self.data: Dict[str, Tuple[str, Optional[float]]] = {}
        self.calls: List[Tuple[Any, ...]] = []

    def _live(self, key: str) -> bool:
        if key not in self.data:
            return False
        _, expires_at = self.data[key]
        if expires_at is not None and self.clock() >= expires_at:
            del self.data[key]
            return False
        return True

    async def get(self, key: str) -> Optional[str]:
        self.calls.append(("get", key))
        return self.data[key][0] if self._live(key) else None

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self.calls.append(("set", key, ex))
        expires_at = self.clock() + ex if ex is not None else None
        self.data[key] = (value, expires_at)
        return True

    async def delete(self, *keys: str) -> int:
        self.calls.append(("delete",) + keys)
        removed = 0
        for key in keys:
            if self._live(key):
                del self.data[key]
                removed += 1
        return removed

    async def keys(self, pattern: str) -> List[str]:
        self.calls.append(("keys", pattern))
        return [key for key in list(self.data) if self._live(key) and fnmatch.fnmatchcase(key, pattern)]

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass

    def ttl_of(self, key: str) -> Optional[float]:
        _, expires_at = self.data[key]
        return None if expires_at is None else expires_at - self.clock()

    def commands(self, name: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]


class CatalogStub:
    """
    Scripted catalog API behind httpx.MockTransport.

    Each route holds a queue of responses; the last one repeats. A queued
    exception is raised instead of answering.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> None:
        self.routes[(method, path)] = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/api"):]
        queue = self.routes.get((request.method, path))

        if not queue:
            return httpx.Response(404, json={"message": "not found"})

        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        # Fresh response per request; scripted ones may repeat
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path == f"/api{path}"
        ]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture
def redis_handle(fake_redis):
    return RedisCache(redis_url="redis://fake:6379/0", client=fake_redis)


@pytest.fixture
def store(redis_handle):
    return CacheManager(redis_handle)


@pytest.fixture
def catalog():
    return CatalogStub()


@pytest.fixture
def settings():
    return CatalogSettings(api_url=API_URL, retry_delay=0, request_timeout=1.0)


@pytest.fixture
def api_client(catalog, settings):
    return CatalogAPIClient(
        settings.api_url,
        token_provider=lambda: "session-token",
        timeout=settings.request_timeout,
        retry_delay=settings.retry_delay,
        transport=catalog.transport(),
    )


@pytest.fixture
def service(api_client, store, settings):
    return CatalogDataService(api_client, store, settings)
