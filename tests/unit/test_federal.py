"""Tests for federal bracket estimation and rate clamping."""

from decimal import Decimal

import pytest

from stipendcalc.sdk.taxes import clamp_rate, combined_rate, estimate_federal_tax_bracket


@pytest.mark.parametrize("income, expected", [
    (0, "0.10"),
    (11600, "0.10"),
    (11601, "0.12"),
    (75000, "0.22"),
    ("191950", "0.24"),
    (Decimal("250000"), "0.35"),
    (1000000, "0.37"),
])
def test_estimate_federal_tax_bracket(income, expected):
    assert estimate_federal_tax_bracket(income) == Decimal(expected)


class TestCombinedRate:

    def test_sum(self):
        assert combined_rate(Decimal("0.22"), Decimal("0.05")) == Decimal("0.27")

    def test_clamped_to_one(self):
        assert combined_rate(Decimal("0.7"), Decimal("0.6")) == Decimal("1")

    def test_clamp_rate_floor(self):
        assert clamp_rate(Decimal("-0.1")) == Decimal("0")
