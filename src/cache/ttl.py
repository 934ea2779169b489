"""TTL (Time To Live) policies for catalog entity types.

This module defines cache expiration policies based on how often each
kind of catalog data changes.
"""

from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class EntityKind(str, Enum):
    """Catalog entity types that own a cache slot."""

    PACKAGE = "package"
    PACKAGE_DETAILS = "package_details"
    PACKAGE_REVIEWS = "package_reviews"
    PACKAGE_AGENCY = "package_agency"
    SIMILAR_PACKAGES = "similar_packages"
    PACKAGE_LIST = "package_list"


class CacheTTL(Enum):
    """
    Cache TTL policies for catalog content.

    Listing data is the most volatile (any package write changes it),
    reviews arrive steadily, and package entities are near-immutable:

    - Listings: 15 minutes
    - Reviews: 30 minutes
    - Packages, details, agency info, similar packages: 1 hour

    Values are in seconds.
    """

    PACKAGE_LIST = 900  # 15 minutes
    REVIEWS = 1800  # 30 minutes
    ENTITY = 3600  # 1 hour

    @staticmethod
    def get_ttl(kind: EntityKind) -> int:
        """
        Determine TTL for a catalog entity type.

        Args:
            kind: Entity type being cached

        Returns:
            TTL in seconds

        Example:
            >>> CacheTTL.get_ttl(EntityKind.PACKAGE_LIST)
            900
        """
        if kind == EntityKind.PACKAGE_LIST:
            ttl = CacheTTL.PACKAGE_LIST.value

        elif kind == EntityKind.PACKAGE_REVIEWS:
            ttl = CacheTTL.REVIEWS.value

        elif kind in (
            EntityKind.PACKAGE,
            EntityKind.PACKAGE_DETAILS,
            EntityKind.PACKAGE_AGENCY,
            EntityKind.SIMILAR_PACKAGES,
        ):
            ttl = CacheTTL.ENTITY.value

        # Default to the shortest TTL for anything unrecognised
        else:
            ttl = CacheTTL.PACKAGE_LIST.value
            logger.warning(
                "unknown_entity_using_default_ttl",
                kind=kind,
                default_ttl=ttl,
            )

        logger.debug("ttl_determined", kind=kind, ttl_seconds=ttl)

        return ttl
