"""
Unit tests for catalog API exceptions.

Tests the exception hierarchy defined in src/catalog/exceptions.py.
"""

import pytest

from src.catalog.exceptions import (
    CatalogAPIError,
    NotFoundError,
    RetryExhaustedError,
    UpstreamClientError,
    UpstreamNetworkError,
    UpstreamServerError,
    UpstreamTimeoutError,
)


class TestCatalogAPIError:
    """Test base CatalogAPIError exception."""

    def test_basic_initialization(self):
        """Test basic error initialization."""
        error = CatalogAPIError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.status_code is None
        assert error.retryable is False


class TestRetryEligibility:
    """Test which errors may be retried."""

    @pytest.mark.parametrize(
        "error",
        [
            UpstreamTimeoutError(),
            UpstreamNetworkError("connection refused"),
            UpstreamServerError("Catalog API returned 503", status_code=503),
        ],
    )
    def test_transient_errors_are_retryable(self, error):
        """Test timeouts, network errors and 5xx are retryable."""
        assert error.retryable is True
        assert isinstance(error, CatalogAPIError)

    @pytest.mark.parametrize(
        "error",
        [
            UpstreamClientError("bad request", status_code=400),
            NotFoundError("package", "42"),
        ],
    )
    def test_client_errors_are_not_retryable(self, error):
        """Test 4xx errors are never retried."""
        assert error.retryable is False


class TestUpstreamTimeoutError:
    """Test UpstreamTimeoutError exception."""

    def test_message_includes_timeout(self):
        """Test the timeout is part of the message."""
        error = UpstreamTimeoutError(timeout_seconds=8)
        assert "(8s)" in str(error)
        assert error.status_code == 408
        assert error.timeout_seconds == 8


class TestNotFoundError:
    """Test NotFoundError exception."""

    def test_default_message(self):
        """Test message is built from resource type and id."""
        error = NotFoundError("package", "42")
        assert str(error) == "Package '42' not found"
        assert error.status_code == 404
        assert isinstance(error, UpstreamClientError)


class TestRetryExhaustedError:
    """Test RetryExhaustedError exception."""

    def test_wraps_last_error(self):
        """Test the last error and status are carried over."""
        last = UpstreamServerError("Catalog API returned 503", status_code=503)
        error = RetryExhaustedError(last)

        assert error.last_error is last
        assert error.attempts == 2
        assert error.status_code == 503
        assert "after 2 attempts" in str(error)
        assert error.retryable is False
