"""Tests for OfferComparisonEngine.

The engine is built with small injected tables so results don't depend
on the packaged rate files.
"""

from decimal import Decimal

import pytest

from stipendcalc.sdk.engine import OfferComparisonEngine
from stipendcalc.sdk.errors import UnknownStateError
from stipendcalc.sdk.gsa import GsaRates, GsaRateTable
from stipendcalc.sdk.schemas import JobOffer, TaxContext
from stipendcalc.sdk.states import USState
from stipendcalc.sdk.taxes import StateTaxTable


@pytest.fixture
def engine():
    state_table = StateTaxTable({
        USState.CALIFORNIA: Decimal("0.093"),
        USState.OREGON: Decimal("0.09"),
    })
    gsa_table = GsaRateTable({"Portland, OR": GsaRates(lodging=190, meals=79)})
    return OfferComparisonEngine(state_tax_table=state_table, gsa_rates=gsa_table)


@pytest.fixture
def offers():
    return [
        JobOffer(id="ca", name="Bay Area ICU", location="Oakland, CA", state="CA",
                 hourly_rate=55, hours_per_week=36, housing_stipend=1500, meals_stipend=500),
        JobOffer(id="or", name="Portland ER", location="Portland, OR", state="OR",
                 hourly_rate=40, hours_per_week=36, housing_stipend=1300, meals_stipend=500),
    ]


class TestEngineCompare:
    """Tests for comparisons driven by a TaxContext."""

    def test_state_rate_from_tax_home_not_assignment(self, engine, offers):
        """A Texas tax home pays no state tax on a California assignment."""
        context = TaxContext(tax_home_state="TX", federal_rate="0.22", weeks_worked=48)

        report = engine.compare(offers, context)

        # 1980 * 0.78 + 2000
        assert report.result_for("ca").weekly_take_home == Decimal("3544.4")

    def test_tax_home_rate_applied(self, engine, offers):
        context = TaxContext(tax_home_state="CA", federal_rate="0.22")

        report = engine.compare(offers, context)

        # 1980 * (1 - 0.313) + 2000
        assert report.result_for("ca").weekly_take_home == Decimal("3360.26")

    def test_unknown_tax_home_raises(self, engine, offers):
        context = TaxContext(tax_home_state="NY")

        with pytest.raises(UnknownStateError):
            engine.compare(offers, context)

    def test_best_offer(self, engine, offers):
        context = TaxContext(tax_home_state="FL")

        assert engine.best_offer(offers, context).id == "ca"

    def test_stipend_tax_savings(self, engine, offers):
        context = TaxContext(tax_home_state="OR", federal_rate="0.22", weeks_worked=40)

        # 1800 * 0.31 * 40
        assert engine.stipend_tax_savings(offers[1], context) == Decimal("22320")


class TestEngineExplicitRates:
    """Tests for operations taking explicit rates."""

    def test_get_state_tax_rate(self, engine):
        assert engine.get_state_tax_rate("Oregon") == Decimal("0.09")
        assert engine.get_state_tax_rate("WA") == Decimal("0")

    def test_compare_offers(self, engine, offers):
        report = engine.compare_offers(offers, Decimal("0.22"), Decimal("0"))

        assert [r.offer_id for r in report] == ["ca", "or"]

    def test_check_gsa_compliance(self, engine, offers):
        result = engine.check_gsa_compliance(offers[0], Decimal("107"), Decimal("79"))

        assert result.excess_amount == Decimal("698")

    def test_calculate_stipend_tax_savings(self, engine, offers):
        savings = engine.calculate_stipend_tax_savings(offers[0], Decimal("0.2"), Decimal("0.05"), 10)

        assert savings == Decimal("5000")


class TestEngineGsaLocality:

    def test_locality_rates_used(self, engine, offers):
        result = engine.check_gsa_for_location(offers[1])

        # (190 + 79) * 7
        assert result.weekly_ceiling == Decimal("1883")
        assert result.is_compliant

    def test_unlisted_locality_uses_standard(self, engine, offers):
        result = engine.check_gsa_for_location(offers[0])

        assert result.weekly_ceiling == Decimal("1302")
        assert not result.is_compliant


def test_default_engine_loads_packaged_tables():
    engine = OfferComparisonEngine()

    assert engine.get_state_tax_rate("CA") == Decimal("0.093")
    assert engine.gsa_rates.standard.lodging == Decimal("107")
