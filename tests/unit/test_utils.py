"""
Unit tests for utils.py module.

Tests validation helpers, rate conversions, runway/compound growth and
formatting utilities.
"""

import math

import pytest

from wealthcast.utils import (
    annual_to_monthly,
    calculate_runway,
    check_non_negative,
    compound_growth,
    format_currency,
    millions_formatter,
    monthly_to_annual,
)


class TestValidation:
    """Test input validation functions."""

    def test_check_non_negative_valid(self):
        check_non_negative("x", 0)
        check_non_negative("x", 1.5)

    def test_check_non_negative_invalid(self):
        with pytest.raises(ValueError, match="x must be non-negative"):
            check_non_negative("x", -0.1)


class TestRateConversion:
    """Test annual<->monthly rate conversion functions."""

    def test_round_trip(self):
        r_m = annual_to_monthly(0.12)
        assert monthly_to_annual(r_m) == pytest.approx(0.12)

    def test_monthly_rate_compounds_to_annual(self):
        assert (1 + annual_to_monthly(0.07)) ** 12 == pytest.approx(1.07)


class TestCompoundGrowth:
    """Test compound_growth."""

    def test_reference_value(self):
        """100,000 at 7% for 10 years."""
        assert compound_growth(100_000, 0.07, 10) == pytest.approx(196_715.14, abs=0.01)

    def test_zero_periods_returns_principal(self):
        assert compound_growth(5_000, 0.05, 0) == 5_000

    def test_negative_rate_shrinks(self):
        assert compound_growth(1_000, -0.5, 2) == pytest.approx(250)


class TestCalculateRunway:
    """Test calculate_runway."""

    def test_twelve_months(self):
        assert calculate_runway(12_000, 1_000) == 12

    def test_zero_burn_is_infinite(self):
        assert calculate_runway(12_000, 0) == math.inf

    def test_negative_burn_is_infinite(self):
        assert math.isinf(calculate_runway(100, -50))

    def test_zero_balance(self):
        assert calculate_runway(0, 500) == 0

    def test_negative_balance_rejected(self):
        with pytest.raises(ValueError):
            calculate_runway(-1, 100)


class TestFormatting:
    """Test formatting helpers."""

    def test_format_currency(self):
        assert format_currency(2_340_000) == "$2.3M"
        assert format_currency(2_340_000, decimals=0) == "$2M"

    def test_format_currency_infinite(self):
        assert format_currency(math.inf) == "∞"

    @pytest.mark.parametrize("value, expected", [
        (0, "0"),
        (25_000_000, "25M"),
        (12_500_000, "12.5M"),
    ])
    def test_millions_formatter(self, value, expected):
        assert millions_formatter(value, None) == expected
