"""
Custom exceptions for the upstream catalog API.

This module defines the hierarchy of errors the catalog client raises.
Each class states whether it is eligible for the single retry; only these
errors (never cache errors) propagate to callers of the catalog service.
"""

from typing import Optional


class CatalogAPIError(Exception):
    """
    Base exception for all catalog API related errors.

    Use this for catching any upstream failure.

    Attributes:
        message: Error description
        status_code: HTTP status code, if the upstream answered
        retryable: Whether one retry is permitted for this error
    """

    retryable = False

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class UpstreamTimeoutError(CatalogAPIError):
    """
    Raised when the request timeout fires before a response arrives.

    The in-flight request is cancelled. Transient; eligible for one retry.

    Example:
        >>> raise UpstreamTimeoutError(timeout_seconds=8)
    """

    retryable = True

    def __init__(
        self,
        message: str = "Catalog API request timed out",
        timeout_seconds: float = 8,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"{message} ({timeout_seconds}s)", status_code=408)


class UpstreamNetworkError(CatalogAPIError):
    """
    Raised when the request never got a response (DNS, refused, reset).

    Transient; eligible for one retry.
    """

    retryable = True


class UpstreamServerError(CatalogAPIError):
    """
    Raised when the catalog API answers with a 5xx status.

    Typically transient (overload, deploys); eligible for one retry.

    Example:
        >>> raise UpstreamServerError("Catalog API returned 503", status_code=503)
    """

    retryable = True

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message, status_code=status_code)


class UpstreamClientError(CatalogAPIError):
    """
    Raised when the catalog API rejects the request with a 4xx status.

    This is a client-side error and is never retried.
    """

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code=status_code)


class NotFoundError(UpstreamClientError):
    """
    Raised when the requested catalog resource does not exist (404).

    Example:
        >>> raise NotFoundError("package", "42")
    """

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        message: Optional[str] = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id

        if message is None:
            message = f"{resource_type.capitalize()} '{resource_id}' not found"

        super().__init__(message, status_code=404)


class RetryExhaustedError(CatalogAPIError):
    """
    Raised when the single permitted retry also failed.

    Attributes:
        last_error: The error raised by the retry attempt
        attempts: Total number of attempts made
    """

    def __init__(self, last_error: CatalogAPIError, attempts: int = 2) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            f"Catalog API request failed after {attempts} attempts: {last_error.message}",
            status_code=last_error.status_code,
        )
