"""Cache key generation for consistent, deterministic cache keys.

This module provides the CacheKeyGenerator class for building the
per-package and listing keys used by the catalog store, and for
canonicalizing filter sets so equivalent filters share one key.
"""

from enum import Enum
from typing import Any, List, Mapping, Optional

import structlog

logger = structlog.get_logger(__name__)


def format_param(value: Any) -> str:
    """
    Render a filter value the way it appears in a query string.

    Args:
        value: Filter value (str, number, bool or Enum)

    Returns:
        String form: booleans as ``true``/``false``, enums by value

    Example:
        >>> format_param(True)
        'true'
    """
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class CacheKeyGenerator:
    """
    Generate consistent cache keys for catalog entities.

    Per-package keys follow the pattern ``package:{id}[:{facet}]`` and
    listing keys follow ``packages:list:{filter_string}``.

    Attributes:
        PACKAGE_PREFIX: Namespace for per-package keys
        LIST_PREFIX: Namespace for listing keys
        LIST_PATTERN: Glob pattern matching every listing key
    """

    PACKAGE_PREFIX = "package"
    LIST_PREFIX = "packages:list"
    LIST_PATTERN = "packages:list:*"

    @staticmethod
    def canonicalize_filters(filters: Optional[Mapping[str, Any]]) -> str:
        """
        Canonicalize a filter set into a deterministic string.

        Unset (None) values are dropped, the remaining pairs are sorted by
        key and joined as ``key=value`` with ``&``.

        Args:
            filters: Filter mapping (may be None or empty)

        Returns:
            Canonical filter string (empty string for no filters)

        Example:
            >>> CacheKeyGenerator.canonicalize_filters({"page": 1, "limit": 12})
            'limit=12&page=1'
        """
        if not filters:
            return ""

        pairs = sorted(
            (str(key), format_param(value))
            for key, value in filters.items()
            if value is not None
        )

        return "&".join(f"{key}={value}" for key, value in pairs)

    @staticmethod
    def package(package_id: str) -> str:
        return f"{CacheKeyGenerator.PACKAGE_PREFIX}:{package_id}"

    @staticmethod
    def package_details(package_id: str) -> str:
        return f"{CacheKeyGenerator.package(package_id)}:details"

    @staticmethod
    def package_reviews(package_id: str) -> str:
        return f"{CacheKeyGenerator.package(package_id)}:reviews"

    @staticmethod
    def package_agency(package_id: str) -> str:
        return f"{CacheKeyGenerator.package(package_id)}:agency"

    @staticmethod
    def similar_packages(package_id: str) -> str:
        return f"{CacheKeyGenerator.package(package_id)}:similar"

    @staticmethod
    def package_list(filter_string: str) -> str:
        """
        Generate the listing key for a canonical filter string.

        Args:
            filter_string: Output of canonicalize_filters()

        Returns:
            Cache key in format: packages:list:{filter_string}
        """
        cache_key = f"{CacheKeyGenerator.LIST_PREFIX}:{filter_string}"

        logger.debug("cache_key_generated", cache_key=cache_key)

        return cache_key

    @staticmethod
    def all_package_keys(package_id: str) -> List[str]:
        """
        List every key namespaced under one package.

        Args:
            package_id: Package identifier

        Returns:
            The five per-package keys (basic, details, reviews, agency,
            similar)
        """
        return [
            CacheKeyGenerator.package(package_id),
            CacheKeyGenerator.package_details(package_id),
            CacheKeyGenerator.package_reviews(package_id),
            CacheKeyGenerator.package_agency(package_id),
            CacheKeyGenerator.similar_packages(package_id),
        ]
