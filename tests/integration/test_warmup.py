"""
Integration tests for the cache warm-up entry point.

Runs src.main.main() end to end against the in-memory Redis and the
scripted catalog API.
"""
import os
from unittest.mock import patch

import httpx
import pytest

from src.cache.connection import CacheState, RedisCache
from src.catalog.client import CatalogAPIClient
from src.main import main

WARMUP_ENV = {
    "CATALOG_API_URL": "http://catalog.test/api",
    "CATALOG_API_TOKEN": "deploy-token",
    "CATALOG_RETRY_DELAY": "0",
}


def client_factory(catalog):
    """Build CatalogAPIClient instances wired to the stub transport."""

    def build(*args, **kwargs):
        return CatalogAPIClient(*args, transport=catalog.transport(), **kwargs)

    return build


class TestWarmup:
    """Test suite for main()."""

    @pytest.mark.asyncio
    @patch.dict(os.environ, WARMUP_ENV)
    async def test_warmup_prefetches_listing(self, catalog, fake_redis):
        """Test warm-up fills the popular listing and closes resources."""
        catalog.add("GET", "/packages", httpx.Response(200, json={"data": [], "pagination": {}}))
        handle = RedisCache(client=fake_redis)

        with patch("src.main.cache", handle), patch(
            "src.catalog.service.CatalogAPIClient", side_effect=client_factory(catalog)
        ):
            exit_code = await main()

        assert exit_code == 0
        assert "packages:list:limit=12&page=1&status=PUBLISHED" in fake_redis.data
        assert catalog.requests[0].headers["Authorization"] == "Bearer deploy-token"
        assert handle.state == CacheState.CLOSED

    @pytest.mark.asyncio
    @patch.dict(os.environ, {**WARMUP_ENV, "REDIS_URL": "not-a-redis-url://nowhere"})
    async def test_warmup_without_redis(self, catalog):
        """Test warm-up completes when Redis cannot be opened."""
        catalog.add("GET", "/packages", httpx.Response(200, json={"data": []}))
        handle = RedisCache()

        with patch("src.main.cache", handle), patch(
            "src.catalog.service.CatalogAPIClient", side_effect=client_factory(catalog)
        ):
            exit_code = await main()

        assert exit_code == 0
        assert len(catalog.requests) == 1

    @pytest.mark.asyncio
    @patch.dict(os.environ, WARMUP_ENV)
    async def test_warmup_survives_upstream_outage(self, catalog, fake_redis):
        """Test an unavailable catalog API does not fail the warm-up."""
        catalog.add("GET", "/packages", httpx.Response(503))

        with patch("src.main.cache", RedisCache(client=fake_redis)), patch(
            "src.catalog.service.CatalogAPIClient", side_effect=client_factory(catalog)
        ):
            exit_code = await main()

        assert exit_code == 0
        assert fake_redis.data == {}
