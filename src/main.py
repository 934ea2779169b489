"""
Catalog cache warm-up - Main Entry Point

Configures logging, opens the process-wide Redis handle, prefetches the
popular packages listing and reports component health. Intended to run
at deploy time or from a scheduler.
"""
import asyncio
import sys

from src.cache.connection import cache
from src.catalog.service import CatalogDataService
from src.catalog.settings import CatalogSettings
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


async def main() -> int:
    """
    Warm the catalog cache once.

    Returns:
        Process exit code (0 even when Redis is down; the cache is optional)
    """
    settings = CatalogSettings.from_env()
    setup_logging(level=settings.log_level)

    logger.info(
        "warmup_starting",
        api_url=settings.api_url,
        log_level=settings.log_level,
    )

    cache.redis_url = settings.redis_url
    cache.open()

    service = CatalogDataService.from_settings(settings, cache)

    try:
        prefetched = await service.prefetch_popular_packages()
        health = await service.health_check()

        logger.info(
            "warmup_complete",
            prefetched=prefetched,
            status=health.status,
            components=health.components,
        )

    finally:
        await service.close()
        await cache.close()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
