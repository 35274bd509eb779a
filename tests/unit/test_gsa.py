"""Tests for GSA per-diem compliance checks and locality rate tables."""

from decimal import Decimal

import pytest
import yaml

from stipendcalc.sdk.errors import InvalidInputError, RateTableError
from stipendcalc.sdk.gsa import (
    STANDARD_GSA_RATES,
    GsaRates,
    GsaRateTable,
    check_gsa_compliance,
    load_gsa_rate_table,
    normalize_locality,
)
from stipendcalc.sdk.schemas import JobOffer


def make_offer(housing, meals, location=None) -> JobOffer:
    return JobOffer(
        id="gsa",
        hourly_rate=40,
        hours_per_week=36,
        housing_stipend=housing,
        meals_stipend=meals,
        location=location,
    )


class TestCheckGsaCompliance:
    """Tests for the weekly ceiling boundary."""

    def test_stipend_at_ceiling_is_compliant(self):
        """(107 + 79) * 7 = 1302."""
        result = check_gsa_compliance(make_offer(749, 553), Decimal("107"), Decimal("79"))

        assert result.weekly_ceiling == Decimal("1302")
        assert result.is_compliant is True
        assert result.excess_amount == Decimal("0")
        assert result.housing_within_limit
        assert result.meals_within_limit

    def test_one_dollar_over_ceiling(self):
        result = check_gsa_compliance(make_offer(750, 553), Decimal("107"), Decimal("79"))

        assert result.is_compliant is False
        assert result.excess_amount == Decimal("1")
        assert result.housing_within_limit is False
        assert result.meals_within_limit is True

    def test_zero_rates_flag_any_stipend(self):
        result = check_gsa_compliance(make_offer(1, 0), Decimal("0"), Decimal("0"))

        assert result.is_compliant is False
        assert result.excess_amount == Decimal("1")

    def test_zero_stipend_with_zero_rates_is_compliant(self):
        result = check_gsa_compliance(make_offer(0, 0), Decimal("0"), Decimal("0"))

        assert result.is_compliant is True

    def test_daily_breakdown(self):
        result = check_gsa_compliance(make_offer(1400, 700), Decimal("150"), Decimal("79"))

        assert result.daily_housing == Decimal("200")
        assert result.housing_excess == Decimal("50")
        assert result.meals_excess == Decimal("21")

    def test_negative_rate_raises(self):
        with pytest.raises(InvalidInputError) as exc_info:
            check_gsa_compliance(make_offer(700, 500), Decimal("-1"), Decimal("79"))

        assert "gsa_daily_lodging" in exc_info.value.errors[0]

    def test_invalid_offer_raises(self):
        with pytest.raises(InvalidInputError):
            check_gsa_compliance(make_offer(-5, 500), Decimal("107"), Decimal("79"))

    def test_to_dict(self):
        data = check_gsa_compliance(make_offer(749, 553), 107, 79).to_dict()

        assert data["offer_id"] == "gsa"
        assert data["weekly_ceiling"] == "1302"
        assert data["is_compliant"] is True


class TestGsaRateTable:
    """Tests for locality lookups."""

    def test_normalize_locality(self):
        assert normalize_locality("  Palo  Alto ,CA ") == "palo alto, ca"

    def test_locality_lookup_and_fallback(self):
        table = GsaRateTable({"Palo Alto, CA": GsaRates(lodging=250, meals=79)})

        assert table.rates_for("palo alto,  ca").lodging == Decimal("250")
        assert table.rates_for("Boise, ID") == STANDARD_GSA_RATES
        assert table.rates_for(None) == STANDARD_GSA_RATES

    def test_weekly_ceiling(self):
        assert STANDARD_GSA_RATES.weekly_ceiling == Decimal("1302")

    def test_with_standard(self):
        table = GsaRateTable({"Boston, MA": GsaRates(lodging=300, meals=79)}, fiscal_year=2024)

        updated = table.with_standard(GsaRates(lodging=110, meals=68))

        assert updated.rates_for("Reno, NV").lodging == Decimal("110")
        assert updated.rates_for("boston, ma").lodging == Decimal("300")
        assert updated.fiscal_year == 2024

    def test_from_dict_rejects_negative_rates(self):
        with pytest.raises(RateTableError):
            GsaRateTable.from_dict({"standard": {"lodging": -1, "meals": 79}})

    def test_packaged_table(self):
        table = load_gsa_rate_table()

        assert table.standard == STANDARD_GSA_RATES
        assert table.fiscal_year == 2024

    def test_override_file(self, tmp_path):
        rates_file = tmp_path / "gsa.yaml"
        rates_file.write_text(yaml.dump({
            "fiscal_year": 2025,
            "standard": {"lodging": 110, "meals": 68},
            "localities": {"San Diego, CA": {"lodging": 211, "meals": 79}},
        }))

        table = load_gsa_rate_table(rates_file)

        assert table.localities == ["san diego, ca"]
        assert table.rates_for("San Diego, CA").weekly_ceiling == Decimal("2030")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_gsa_rate_table(tmp_path / "missing.yaml")
