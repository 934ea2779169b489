"""
Catalog data service.

Single entry point for catalog reads. Every read follows the same
cache-aside sequence: canonical key, cache lookup, upstream fetch on miss
(bounded retry and timeout), encode and write back, return. Cache failures
only ever make a read slower; only upstream failures reach the caller.
"""

import json
import time
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from src.cache import compression
from src.cache.connection import RedisCache
from src.cache.exceptions import CacheError, DecodeCorruptionError, SchemaMismatchError
from src.cache.keys import CacheKeyGenerator
from src.cache.manager import CacheManager
from src.cache.result import CacheResult
from src.cache.ttl import EntityKind
from src.catalog.client import CatalogAPIClient
from src.catalog.exceptions import CatalogAPIError
from src.catalog.settings import CatalogSettings
from src.models.catalog import CACHE_SCHEMA_VERSION, CacheEnvelope, PackageFilters, ReviewInput
from src.models.responses import HealthCheckResponse
from src.utils.logger import get_logger, log_catalog_read

logger = get_logger(__name__)

# Field selection per read path; keeps upstream payloads minimal
LIST_FIELDS = (
    "id,title,summary,price,discountPrice,destination,duration,tourType,"
    "coverImage,startDate,endDate,agencyId,images,minCapacity,maxCapacity"
)
BASIC_FIELDS = (
    "id,title,subtitle,summary,description,price,discountPrice,destination,"
    "duration,tourType,coverImage,startDate,endDate,agencyId,images,"
    "minCapacity,maxCapacity,inclusions,exclusions"
)
SIMILAR_FIELDS = (
    "id,title,summary,price,discountPrice,destination,duration,tourType,coverImage"
)

DEFAULT_LIST_LIMIT = 12
POPULAR_FILTERS = {"limit": DEFAULT_LIST_LIMIT, "page": 1, "status": "PUBLISHED"}

SERVICE_VERSION = "1.0.0"

CacheGetter = Callable[[], Awaitable[CacheResult[Optional[Any]]]]
CacheSetter = Callable[[Any], Awaitable[CacheResult[bool]]]
Fetcher = Callable[[], Awaitable[Any]]


def _data(body: Any, path: str) -> Any:
    """Extract the ``data`` member of an upstream response body."""
    if not isinstance(body, dict) or "data" not in body:
        raise CatalogAPIError(f"Catalog API response for {path} has no data member")
    return body["data"]


class CatalogDataService:
    """
    Cache-aside orchestration over the catalog API and the Redis store.

    Attributes:
        client: Upstream catalog API client
        store: Per-entity cache store
        settings: Timeouts and compression threshold

    Example:
        >>> service = CatalogDataService(client, CacheManager(handle))
        >>> package = await service.get_package_basic("42")
    """

    def __init__(
        self,
        client: CatalogAPIClient,
        store: CacheManager,
        settings: Optional[CatalogSettings] = None,
    ) -> None:
        self.client = client
        self.store = store
        self.settings = settings or CatalogSettings()

    @classmethod
    def from_settings(
        cls,
        settings: CatalogSettings,
        connection: RedisCache,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
    ) -> "CatalogDataService":
        """
        Build a service with a fresh API client bound to ``connection``.

        Without a token provider the static ``settings.api_token`` is used.
        """
        if token_provider is None:
            token_provider = lambda: settings.api_token  # noqa: E731

        client = CatalogAPIClient(
            settings.api_url,
            token_provider=token_provider,
            timeout=settings.request_timeout,
            retry_delay=settings.retry_delay,
        )
        return cls(client, CacheManager(connection), settings)

    def _encode(self, envelope: CacheEnvelope) -> str:
        """Compress large payloads; small ones are stored as plain JSON."""
        value = envelope.model_dump(mode="json")

        if compression.should_compress(value, self.settings.compression_threshold):
            return compression.encode(value)

        return json.dumps(value, separators=(",", ":"))

    def _unwrap(self, key: str, payload: Any, kind: EntityKind, variant: str) -> Any:
        """
        Decode a cached payload and check its envelope.

        Raises:
            DecodeCorruptionError: Payload cannot be decoded
            SchemaMismatchError: Envelope is for another version or variant
        """
        if not isinstance(payload, str):
            raise DecodeCorruptionError("Cached payload is not a string", key=key)

        decoded = compression.decode_strict(payload)

        try:
            envelope = CacheEnvelope.model_validate(decoded)
        except ValidationError as e:
            raise SchemaMismatchError(
                f"Cached value is not a catalog envelope: {e.error_count()} errors", key=key
            ) from e

        if envelope.schema_version != CACHE_SCHEMA_VERSION:
            raise SchemaMismatchError(
                "Cached schema version differs",
                key=key,
                expected=str(CACHE_SCHEMA_VERSION),
                found=str(envelope.schema_version),
            )

        if envelope.kind != kind or envelope.variant != variant:
            raise SchemaMismatchError(
                "Cached entry is for another request",
                key=key,
                expected=f"{kind.value}:{variant}",
                found=f"{envelope.kind.value}:{envelope.variant}",
            )

        return envelope.data

    async def _read_through(
        self,
        operation: str,
        kind: EntityKind,
        key: str,
        cache_get: CacheGetter,
        cache_set: CacheSetter,
        fetch: Fetcher,
        variant: str = "",
    ) -> Any:
        """
        Run the cache-aside sequence for one read.

        Cache-layer errors (unavailable backend, corrupt or mismatched
        entries) are logged and discarded here; the read continues as a
        miss. Upstream errors propagate.
        """
        start_time = time.perf_counter()

        cached = await cache_get()

        if cached.error:
            self._discard_cache_error(operation, key, cached.error)

        elif cached.value is not None:
            try:
                data = self._unwrap(key, cached.value, kind, variant)

            except CacheError as e:
                self._discard_cache_error(operation, key, e)

            else:
                log_catalog_read(
                    operation,
                    duration_ms=(time.perf_counter() - start_time) * 1000,
                    cached=True,
                    key=key,
                )
                return data

        logger.info("cache_miss_fetching", operation=operation, key=key)

        try:
            data = await fetch()

        except CatalogAPIError as e:
            log_catalog_read(
                operation,
                duration_ms=(time.perf_counter() - start_time) * 1000,
                cached=False,
                error=e.message,
                key=key,
                status_code=e.status_code,
            )
            raise

        envelope = CacheEnvelope(kind=kind, variant=variant, data=data)
        written = await cache_set(self._encode(envelope))

        if written.error:
            self._discard_cache_error(operation, key, written.error)

        log_catalog_read(
            operation,
            duration_ms=(time.perf_counter() - start_time) * 1000,
            cached=False,
            key=key,
            cache_written=written.ok,
        )

        return data

    @staticmethod
    def _discard_cache_error(operation: str, key: str, error: CacheError) -> None:
        logger.warning(
            "cache_error_discarded",
            operation=operation,
            key=key,
            error=error.message,
            error_type=type(error).__name__,
        )

    @staticmethod
    def _list_params(
        filters: Union[PackageFilters, Mapping[str, Any], None],
    ) -> dict[str, Any]:
        if filters is None:
            params: dict[str, Any] = {}
        elif isinstance(filters, PackageFilters):
            params = filters.to_params()
        else:
            params = {key: value for key, value in filters.items() if value is not None}

        params.setdefault("limit", DEFAULT_LIST_LIMIT)
        return params

    async def get_all_packages(
        self,
        filters: Union[PackageFilters, Mapping[str, Any], None] = None,
    ) -> Any:
        """
        Get a filtered, paginated package listing.

        Args:
            filters: PackageFilters or a mapping of upstream filter names.
                ``limit`` defaults to 12.

        Returns:
            Listing body: ``{"data": [...], "pagination": {...}}``

        Raises:
            CatalogAPIError: If the upstream fetch fails (after the retry
                budget for transient errors)
        """
        params = self._list_params(filters)
        filter_string = CacheKeyGenerator.canonicalize_filters(params)

        async def fetch() -> Any:
            return await self.client.get("/packages", params={**params, "fields": LIST_FIELDS})

        return await self._read_through(
            "get_all_packages",
            EntityKind.PACKAGE_LIST,
            CacheKeyGenerator.package_list(filter_string),
            lambda: self.store.get_package_list(filter_string),
            lambda payload: self.store.set_package_list(filter_string, payload),
            fetch,
        )

    async def get_package_basic(self, package_id: str) -> Any:
        """Get the basic attributes of one package."""

        path = f"/packages/{package_id}"

        async def fetch() -> Any:
            body = await self.client.get(path, params={"fields": BASIC_FIELDS})
            return _data(body, path)

        return await self._read_through(
            "get_package_basic",
            EntityKind.PACKAGE,
            CacheKeyGenerator.package(package_id),
            lambda: self.store.get_package(package_id),
            lambda payload: self.store.set_package(package_id, payload),
            fetch,
        )

    async def get_package_details(self, package_id: str) -> Any:
        """Get itinerary, inclusions and policy details of one package."""

        path = f"/packages/{package_id}/details"

        async def fetch() -> Any:
            body = await self.client.get(path)
            return _data(body, path)

        return await self._read_through(
            "get_package_details",
            EntityKind.PACKAGE_DETAILS,
            CacheKeyGenerator.package_details(package_id),
            lambda: self.store.get_package_details(package_id),
            lambda payload: self.store.set_package_details(package_id, payload),
            fetch,
        )

    async def get_package_reviews(self, package_id: str, page: int = 1, limit: int = 10) -> Any:
        """
        Get one page of reviews for a package.

        The reviews key holds a single page; the envelope variant records
        which one, and a request for a different page is a miss that
        overwrites it.

        Returns:
            Reviews body: ``{"data": [...], "pagination": {...}}``
        """
        params = {"page": page, "limit": limit}
        variant = CacheKeyGenerator.canonicalize_filters(params)

        async def fetch() -> Any:
            return await self.client.get(f"/packages/{package_id}/reviews", params=params)

        return await self._read_through(
            "get_package_reviews",
            EntityKind.PACKAGE_REVIEWS,
            CacheKeyGenerator.package_reviews(package_id),
            lambda: self.store.get_package_reviews(package_id),
            lambda payload: self.store.set_package_reviews(package_id, payload),
            fetch,
            variant=variant,
        )

    async def get_package_agency(self, package_id: str) -> Any:
        """Get the agency that publishes a package."""

        path = f"/packages/{package_id}/agency"

        async def fetch() -> Any:
            body = await self.client.get(path)
            return _data(body, path)

        return await self._read_through(
            "get_package_agency",
            EntityKind.PACKAGE_AGENCY,
            CacheKeyGenerator.package_agency(package_id),
            lambda: self.store.get_package_agency(package_id),
            lambda payload: self.store.set_package_agency(package_id, payload),
            fetch,
        )

    async def get_similar_packages(self, package_id: str, limit: int = 4) -> Any:
        """Get recommendations similar to a package."""
        params = {"limit": limit}
        variant = CacheKeyGenerator.canonicalize_filters(params)

        path = f"/packages/{package_id}/similar"

        async def fetch() -> Any:
            body = await self.client.get(path, params={**params, "fields": SIMILAR_FIELDS})
            return _data(body, path)

        return await self._read_through(
            "get_similar_packages",
            EntityKind.SIMILAR_PACKAGES,
            CacheKeyGenerator.similar_packages(package_id),
            lambda: self.store.get_similar_packages(package_id),
            lambda payload: self.store.set_similar_packages(package_id, payload),
            fetch,
            variant=variant,
        )

    async def add_package_review(self, package_id: str, rating: int, comment: str) -> None:
        """
        Post a review, then drop the package's cached entries.

        Raises:
            pydantic.ValidationError: If rating or comment is invalid
            CatalogAPIError: If the upstream write fails
        """
        review = ReviewInput(rating=rating, comment=comment)

        try:
            await self.client.post(f"/packages/{package_id}/reviews", json=review.model_dump())
        except CatalogAPIError as e:
            logger.error(
                "add_review_failed",
                package_id=package_id,
                error=e.message,
                status_code=e.status_code,
            )
            raise

        await self.invalidate_package(package_id)

        logger.info("review_added", package_id=package_id, rating=review.rating)

    async def book_package(self, package_id: str, booking: Mapping[str, Any]) -> Any:
        """
        Book a package. Bookings are never cached.

        Returns:
            Booking confirmation (``{"bookingId": ...}``)
        """
        path = f"/packages/{package_id}/book"

        try:
            body = await self.client.post(path, json=dict(booking))
        except CatalogAPIError as e:
            logger.error(
                "book_package_failed",
                package_id=package_id,
                error=e.message,
                status_code=e.status_code,
            )
            raise

        return _data(body, path)

    async def invalidate_package(self, package_id: str) -> int:
        """Drop every cached entry of one package. Returns keys removed."""
        result = await self.store.invalidate_package(package_id)
        if result.error:
            self._discard_cache_error("invalidate_package", package_id, result.error)
        return result.value

    async def invalidate_package_list(self) -> int:
        """Drop every cached listing. Returns keys removed."""
        result = await self.store.invalidate_package_list()
        if result.error:
            self._discard_cache_error(
                "invalidate_package_list", CacheKeyGenerator.LIST_PATTERN, result.error
            )
        return result.value

    async def notify_package_created(self) -> None:
        """Invalidate listings after a package was created."""
        await self.invalidate_package_list()

    async def notify_package_updated(self, package_id: str) -> None:
        """Invalidate a package and all listings after an edit."""
        await self.invalidate_package(package_id)
        await self.invalidate_package_list()

    async def notify_package_deleted(self, package_id: str) -> None:
        """Invalidate a package and all listings after removal."""
        await self.invalidate_package(package_id)
        await self.invalidate_package_list()

    async def prefetch_popular_packages(self) -> bool:
        """
        Warm the default first-page published listing.

        Runs at low priority with the longer prefetch timeout. Failures are
        logged and swallowed.

        Returns:
            True if a fetch was performed and cached, False if the listing
            was already cached or the prefetch failed
        """
        params = self._list_params(POPULAR_FILTERS)
        filter_string = CacheKeyGenerator.canonicalize_filters(params)
        key = CacheKeyGenerator.package_list(filter_string)

        try:
            cached = await self.store.get_package_list(filter_string)
            if cached.error:
                self._discard_cache_error("prefetch_popular_packages", key, cached.error)
            elif cached.value is not None:
                try:
                    self._unwrap(key, cached.value, EntityKind.PACKAGE_LIST, "")
                except CacheError as e:
                    # Stale or corrupt entry is refetched and overwritten
                    self._discard_cache_error("prefetch_popular_packages", key, e)
                else:
                    logger.debug("prefetch_skipped", key=key, reason="already_cached")
                    return False

            logger.info("prefetch_started", key=key)

            data = await self.client.get(
                "/packages",
                params={**params, "fields": LIST_FIELDS},
                timeout=self.settings.prefetch_timeout,
                low_priority=True,
            )

            envelope = CacheEnvelope(kind=EntityKind.PACKAGE_LIST, data=data)
            written = await self.store.set_package_list(filter_string, self._encode(envelope))
            if written.error:
                self._discard_cache_error("prefetch_popular_packages", key, written.error)

            logger.info("prefetch_completed", key=key, cached=written.ok)
            return True

        except Exception as e:
            # Prefetch is best effort and never user-visible
            logger.warning(
                "prefetch_failed",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def health_check(self) -> HealthCheckResponse:
        """
        Report component health.

        A down cache degrades the service but never makes it unhealthy.
        """
        redis_healthy = await self.store.connection.ping()

        return HealthCheckResponse(
            status="healthy" if redis_healthy else "degraded",
            version=SERVICE_VERSION,
            components={
                "redis": "healthy" if redis_healthy else "unavailable",
                "redis_state": self.store.connection.state.value,
            },
        )

    async def close(self) -> None:
        """Close the upstream client. The cache handle is owned by the caller."""
        await self.client.close()
