"""
Upstream catalog API client using httpx.

Every request is bound to a timeout that cancels the in-flight call, and
gets at most one retry: only for network errors, timeouts and 5xx
responses, after a fixed delay, with the original parameters unchanged.
The retry count is an argument threaded through the call, never a flag
stored on shared request state.
"""

import asyncio
from typing import Any, Callable, Mapping, Optional

import httpx
import structlog

from src.catalog.exceptions import (
    CatalogAPIError,
    NotFoundError,
    RetryExhaustedError,
    UpstreamClientError,
    UpstreamNetworkError,
    UpstreamServerError,
    UpstreamTimeoutError,
)

logger = structlog.get_logger(__name__)

# Returns the current session's bearer token, or None when signed out
TokenProvider = Callable[[], Optional[str]]

MAX_RETRIES = 1
DEFAULT_TIMEOUT = 8.0
DEFAULT_RETRY_DELAY = 1.0


class CatalogAPIClient:
    """
    Async client for the catalog HTTP API.

    Attributes:
        base_url: Catalog API root (e.g. ``http://localhost:3000/api``)
        timeout: Default per-request timeout in seconds
        retry_delay: Delay before the single retry in seconds

    Example:
        >>> client = CatalogAPIClient("http://localhost:3000/api", lambda: token)
        >>> body = await client.get("/packages/42", params={"fields": "id,title"})
        >>> await client.close()
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_delay = retry_delay
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            # Cancellation is driven by asyncio.wait_for in _send_once
            timeout=None,
            transport=transport,
        )

    async def __aenter__(self) -> "CatalogAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()
        logger.info("catalog_client_closed")

    async def get(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
        low_priority: bool = False,
    ) -> Any:
        return await self.request(
            "GET", path, params=params, timeout=timeout, low_priority=low_priority
        )

    async def post(
        self,
        path: str,
        json: Any = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return await self.request("POST", path, json=json, timeout=timeout)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        timeout: Optional[float] = None,
        low_priority: bool = False,
    ) -> Any:
        """
        Send a request with timeout and the single-retry policy.

        Args:
            method: HTTP method
            path: Path relative to base_url (e.g. ``/packages/42``)
            params: Query parameters
            json: JSON body
            timeout: Override of the default timeout in seconds
            low_priority: Mark the request with ``X-Priority: low``

        Returns:
            Decoded JSON body, or None for empty responses (e.g. 204)

        Raises:
            UpstreamClientError: On 4xx; never retried
            RetryExhaustedError: When the retry failed as well
            CatalogAPIError: Any other non-retryable failure
        """
        return await self._send(
            method,
            path,
            params=dict(params) if params else None,
            json=json,
            timeout=timeout if timeout is not None else self.timeout,
            low_priority=low_priority,
            attempt=0,
        )

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]],
        json: Any,
        timeout: float,
        low_priority: bool,
        attempt: int,
    ) -> Any:
        try:
            return await self._send_once(method, path, params, json, timeout, low_priority)

        except CatalogAPIError as e:
            if attempt >= MAX_RETRIES:
                logger.error(
                    "upstream_retry_exhausted",
                    method=method,
                    path=path,
                    attempts=attempt + 1,
                    error=e.message,
                    status_code=e.status_code,
                )
                raise RetryExhaustedError(e, attempts=attempt + 1) from e

            if not e.retryable:
                logger.warning(
                    "upstream_request_failed",
                    method=method,
                    path=path,
                    error=e.message,
                    status_code=e.status_code,
                )
                raise

            logger.warning(
                "upstream_retry",
                method=method,
                path=path,
                attempt=attempt + 1,
                delay_seconds=self.retry_delay,
                error=e.message,
                error_type=type(e).__name__,
            )

            await asyncio.sleep(self.retry_delay)

            return await self._send(
                method, path, params, json, timeout, low_priority, attempt=attempt + 1
            )

    def _headers(self, low_priority: bool) -> dict[str, str]:
        headers: dict[str, str] = {}

        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        if low_priority:
            headers["X-Priority"] = "low"

        return headers

    async def _send_once(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]],
        json: Any,
        timeout: float,
        low_priority: bool,
    ) -> Any:
        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    headers=self._headers(low_priority),
                ),
                timeout=timeout,
            )

        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamTimeoutError(timeout_seconds=timeout) from e

        except httpx.RequestError as e:
            raise UpstreamNetworkError(
                f"Catalog API unreachable: {type(e).__name__}: {e}"
            ) from e

        status = response.status_code

        if status >= 500:
            raise UpstreamServerError(
                f"Catalog API returned {status} for {method} {path}", status_code=status
            )

        if status == 404:
            raise NotFoundError("resource", path)

        if status >= 400:
            raise UpstreamClientError(
                f"Catalog API rejected {method} {path} with {status}", status_code=status
            )

        logger.debug("upstream_response", method=method, path=path, status_code=status)

        if status == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise CatalogAPIError(
                f"Catalog API returned invalid JSON for {method} {path}", status_code=status
            ) from e
