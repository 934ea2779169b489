"""
Catalog service configuration.

Settings are read from environment variables. Every value has a default,
so a missing variable never prevents startup.
"""
import os

from pydantic import BaseModel, Field


class CatalogSettings(BaseModel):
    """
    Runtime configuration for the catalog data service.

    Example:
        >>> settings = CatalogSettings.from_env()
        >>> settings.request_timeout
        8.0
    """

    api_url: str = Field(
        "http://localhost:3000/api",
        description="Base URL of the upstream catalog API",
    )
    api_token: str | None = Field(
        None,
        description="Static bearer token, used when no session provider is given",
    )
    redis_url: str = Field(
        "redis://localhost:6379/0",
        description="Redis connection URL",
    )
    request_timeout: float = Field(
        8.0,
        gt=0,
        description="Timeout for on-demand reads in seconds",
    )
    prefetch_timeout: float = Field(
        15.0,
        gt=0,
        description="Timeout for background prefetch in seconds",
    )
    retry_delay: float = Field(
        1.0,
        ge=0,
        description="Fixed delay before the single retry in seconds",
    )
    compression_threshold: int = Field(
        1024,
        ge=0,
        description="Payloads larger than this many bytes are compressed",
    )
    log_level: str = Field(
        "INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @classmethod
    def from_env(cls) -> "CatalogSettings":
        """Build settings from the process environment."""
        env = {
            "api_url": os.getenv("CATALOG_API_URL"),
            "api_token": os.getenv("CATALOG_API_TOKEN"),
            "redis_url": os.getenv("REDIS_URL"),
            "request_timeout": os.getenv("CATALOG_REQUEST_TIMEOUT"),
            "prefetch_timeout": os.getenv("CATALOG_PREFETCH_TIMEOUT"),
            "retry_delay": os.getenv("CATALOG_RETRY_DELAY"),
            "compression_threshold": os.getenv("CACHE_COMPRESSION_THRESHOLD"),
            "log_level": os.getenv("LOG_LEVEL"),
        }
        return cls(**{name: value for name, value in env.items() if value is not None})
