"""
Catalog data access layer.

This package provides the cache-aside catalog service and its upstream
integration:
- CatalogDataService: cache-aside reads, invalidation and prefetch
- CatalogAPIClient: httpx client with timeout and a single retry
- Exception hierarchy for upstream failures
- CatalogSettings: environment-driven configuration

Example:
    >>> from src.catalog import CatalogDataService, CatalogSettings
    >>> from src.cache import cache
    >>> service = CatalogDataService.from_settings(CatalogSettings.from_env(), cache)
    >>> listing = await service.get_all_packages({"status": "PUBLISHED"})
"""

from src.catalog.client import CatalogAPIClient, TokenProvider
from src.catalog.exceptions import (
    CatalogAPIError,
    NotFoundError,
    RetryExhaustedError,
    UpstreamClientError,
    UpstreamNetworkError,
    UpstreamServerError,
    UpstreamTimeoutError,
)
from src.catalog.service import CatalogDataService
from src.catalog.settings import CatalogSettings

__all__ = [
    # Service
    "CatalogDataService",
    "CatalogSettings",
    # Upstream client
    "CatalogAPIClient",
    "TokenProvider",
    # Exceptions
    "CatalogAPIError",
    "NotFoundError",
    "RetryExhaustedError",
    "UpstreamClientError",
    "UpstreamNetworkError",
    "UpstreamServerError",
    "UpstreamTimeoutError",
]
