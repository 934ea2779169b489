"""Unit tests for catalog request and cache models."""

import pytest
from pydantic import ValidationError

from src.cache.ttl import EntityKind
from src.models.catalog import CACHE_SCHEMA_VERSION, CacheEnvelope, PackageFilters, ReviewInput


class TestPackageFilters:
    """Test suite for PackageFilters."""

    def test_to_params_uses_upstream_names(self):
        """Test snake_case fields serialize to upstream query names."""
        filters = PackageFilters(price_min=100, is_flexible=True, start_date_from="2026-01-01")

        assert filters.to_params() == {
            "priceMin": 100.0,
            "isFlexible": True,
            "startDateFrom": "2026-01-01",
        }

    def test_accepts_upstream_names(self):
        """Test filters can be built from upstream names."""
        filters = PackageFilters.model_validate({"priceMax": 500, "durationMin": 3})

        assert filters.price_max == 500
        assert filters.duration_min == 3

    def test_unset_fields_omitted(self):
        """Test only set filters are emitted."""
        assert PackageFilters(page=2).to_params() == {"page": 2}

    def test_invalid_status(self):
        """Test unknown statuses are rejected."""
        with pytest.raises(ValidationError):
            PackageFilters(status="LIVE")

    def test_unknown_filter(self):
        """Test unknown filter names are rejected."""
        with pytest.raises(ValidationError):
            PackageFilters.model_validate({"colour": "blue"})


class TestReviewInput:
    """Test suite for ReviewInput."""

    def test_valid_review(self):
        """Test comments are stripped."""
        review = ReviewInput(rating=4, comment="  Lovely guides  ")

        assert review.comment == "Lovely guides"

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, rating):
        """Test ratings outside 1-5 are rejected."""
        with pytest.raises(ValidationError):
            ReviewInput(rating=rating, comment="ok")

    def test_blank_comment(self):
        """Test whitespace-only comments are rejected."""
        with pytest.raises(ValidationError, match="empty or whitespace"):
            ReviewInput(rating=3, comment="   ")


class TestCacheEnvelope:
    """Test suite for CacheEnvelope."""

    def test_defaults(self):
        """Test envelopes carry the current schema version."""
        envelope = CacheEnvelope(kind=EntityKind.PACKAGE, data={"id": "42"})

        assert envelope.schema_version == CACHE_SCHEMA_VERSION
        assert envelope.variant == ""

    def test_serializes_kind_by_value(self):
        """Test the kind is stored as its string value."""
        dumped = CacheEnvelope(kind=EntityKind.PACKAGE_LIST, data=[]).model_dump(mode="json")

        assert dumped["kind"] == "package_list"
        assert CacheEnvelope.model_validate(dumped).kind == EntityKind.PACKAGE_LIST
