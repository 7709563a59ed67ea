"""Tests for load time / CPM bucketing and cent conversion."""

import pytest

from src.wdc.analytics.distribution import (
    convert_to_cents,
    get_cpm_distribution,
    get_load_time_distribution,
)
from src.wdc.utils.constants import CPM_BUCKETS, LOAD_TIME_BUCKETS


class TestLoadTimeDistribution:
    """Test suite for get_load_time_distribution."""

    @pytest.mark.parametrize(
        "time_ms,expected",
        [
            (0, "0-200ms"),
            (199, "0-200ms"),
            (200, "0200-300ms"),
            (299.9, "0200-300ms"),
            (300, "0300-400ms"),
            (450, "0400-500ms"),
            (500, "0500-600ms"),
            (799, "0600-800ms"),
            (800, "0800-1000ms"),
            (1000, "1000-1200ms"),
            (1499, "1200-1500ms"),
            (1500, "1500-2000ms"),
            (2000, "2000ms above"),
            (60000, "2000ms above"),
        ],
    )
    def test_buckets(self, time_ms, expected):
        """Each time falls into exactly one half-open bucket."""
        assert get_load_time_distribution(time_ms) == expected

    def test_boundaries_belong_to_upper_bucket(self):
        """A boundary value starts the next bucket."""
        for lower, label in LOAD_TIME_BUCKETS:
            assert get_load_time_distribution(lower) == label

    def test_negative_has_no_label(self):
        """Negative times produce no bucket."""
        assert get_load_time_distribution(-1) is None

    def test_missing_has_no_label(self):
        """None and non-numeric values produce no bucket."""
        assert get_load_time_distribution(None) is None
        assert get_load_time_distribution("fast") is None
        assert get_load_time_distribution(float("nan")) is None


class TestCpmDistribution:
    """Test suite for get_cpm_distribution."""

    @pytest.mark.parametrize(
        "cpm,expected",
        [
            (0, "$0-0.5"),
            (0.49, "$0-0.5"),
            (0.5, "$0.5-1"),
            (1.2, "$1-1.5"),
            (1.5, "$1.5-2"),
            (2.5, "$2.5-3"),
            (3.99, "$3-4"),
            (4, "$4-6"),
            (7.5, "$6-8"),
            (8, "$8 above"),
            (125, "$8 above"),
        ],
    )
    def test_buckets(self, cpm, expected):
        """Each price falls into exactly one bucket."""
        assert get_cpm_distribution(cpm) == expected

    def test_boundaries_belong_to_upper_bucket(self):
        """A boundary price starts the next bucket."""
        for lower, label in CPM_BUCKETS:
            assert get_cpm_distribution(lower) == label

    def test_negative_has_no_label(self):
        """Negative prices produce no bucket."""
        assert get_cpm_distribution(-0.01) is None


class TestConvertToCents:
    """Test suite for convert_to_cents."""

    def test_floors_to_cents(self):
        """Prices are floored to integer cents."""
        assert convert_to_cents(2.5) == 250
        assert convert_to_cents(2.0) == 200
        assert convert_to_cents(0.45882675) == 45

    def test_falsy_is_zero(self):
        """Missing or zero prices report as 0."""
        assert convert_to_cents(None) == 0
        assert convert_to_cents(0) == 0
        assert convert_to_cents("") == 0

    def test_nan_is_zero(self):
        """NaN reports as 0."""
        assert convert_to_cents(float("nan")) == 0

    def test_returns_int(self):
        """Result is an int, not a float."""
        assert isinstance(convert_to_cents(1.99), int)
