"""
Pydantic models for catalog requests and cached entries.

Defines the listing filter set, the review submission payload and the
versioned envelope every cached catalog value is wrapped in.
"""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.cache.ttl import EntityKind

# Bump when the shape of cached data changes; older entries become misses
CACHE_SCHEMA_VERSION = 1

PackageStatus = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]
TourType = Literal[
    "ADVENTURE", "CULTURAL", "WILDLIFE", "BEACH", "MOUNTAIN", "CITY", "CRUISE", "OTHER"
]


class PackageFilters(BaseModel):
    """
    Filters accepted by the package listing endpoint.

    Field names are snake_case in Python and serialize to the upstream
    query-string names (``priceMin``, ``startDateFrom``...). Unset fields
    are omitted from both the query string and the cache key.

    Example:
        >>> PackageFilters(page=1, status="PUBLISHED").to_params()
        {'page': 1, 'status': 'PUBLISHED'}
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    page: int | None = Field(None, ge=1)
    limit: int | None = Field(None, ge=1, le=100)
    status: PackageStatus | None = None
    package_type: TourType | None = None
    destination: str | None = None
    search: str | None = None
    price_min: float | None = Field(None, ge=0, alias="priceMin")
    price_max: float | None = Field(None, ge=0, alias="priceMax")
    duration: int | None = Field(None, ge=1)
    duration_min: int | None = Field(None, ge=1, alias="durationMin")
    duration_max: int | None = Field(None, ge=1, alias="durationMax")
    difficulty_level: str | None = Field(None, alias="difficultyLevel")
    is_flexible: bool | None = Field(None, alias="isFlexible")
    start_date_from: str | None = Field(None, alias="startDateFrom")
    start_date_to: str | None = Field(None, alias="startDateTo")

    def to_params(self) -> dict[str, Any]:
        """Return the set filters keyed by their upstream names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ReviewInput(BaseModel):
    """
    Input schema for adding a package review.

    Validates the rating range and strips the comment.
    """

    rating: int = Field(
        ...,
        ge=1,
        le=5,
        description="Star rating from 1 to 5",
    )
    comment: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Review text",
    )

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str) -> str:
        """Strip whitespace and reject blank comments."""
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty or whitespace only")
        return v


class CacheEnvelope(BaseModel):
    """
    Versioned wrapper around every cached catalog value.

    ``variant`` records request parameters that are not part of the key,
    such as the review page, so one key can tell whether it holds the
    page being asked for.

    Attributes:
        schema_version: CACHE_SCHEMA_VERSION at write time
        kind: Entity type stored under the key
        variant: Canonical string of the non-key request parameters
        data: The upstream payload
    """

    schema_version: int = CACHE_SCHEMA_VERSION
    kind: EntityKind
    variant: str = ""
    data: Any = None
