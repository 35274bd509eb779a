"""OfferComparisonEngine - comparison operations bound to injected rate tables.

The engine is stateless apart from the two read-only tables it is built
with. It never caches: repeated calls recompute from their inputs.

Usage:
    from stipendcalc.sdk import OfferComparisonEngine, TaxContext

    engine = OfferComparisonEngine()  # packaged rate tables
    context = TaxContext(tax_home_state="TX", federal_rate="0.22")
    report = engine.compare(offers, context)
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional, Union

from . import comparison, gsa
from .schemas import ComparisonReport, GSAComplianceResult, JobOffer, TaxContext
from .states import USState
from .taxes.state_rates import StateTaxTable, load_state_tax_table

logger = logging.getLogger(__name__)


class OfferComparisonEngine:
    """Compare offers, check GSA compliance and estimate stipend savings."""

    def __init__(
        self,
        state_tax_table: Optional[StateTaxTable] = None,
        gsa_rates: Optional[gsa.GsaRateTable] = None,
    ):
        if state_tax_table is None:
            state_tax_table = load_state_tax_table()
        if gsa_rates is None:
            gsa_rates = gsa.load_gsa_rate_table()
        self.state_tax_table = state_tax_table
        self.gsa_rates = gsa_rates

    # --- Operations with explicit rates ---

    def get_state_tax_rate(self, state: Union[USState, str]) -> Decimal:
        return self.state_tax_table.rate_for(state)

    def compare_offers(
        self,
        offers: Iterable[JobOffer],
        federal_rate: Decimal,
        state_rate: Decimal,
        weeks_worked: int = comparison.DEFAULT_WEEKS_WORKED,
    ) -> ComparisonReport:
        return comparison.compare_offers(offers, federal_rate, state_rate, weeks_worked)

    def check_gsa_compliance(
        self,
        offer: JobOffer,
        gsa_daily_lodging: Decimal,
        gsa_daily_meals: Decimal,
    ) -> GSAComplianceResult:
        return gsa.check_gsa_compliance(offer, gsa_daily_lodging, gsa_daily_meals)

    def calculate_stipend_tax_savings(
        self,
        offer: JobOffer,
        federal_rate: Decimal,
        state_rate: Decimal,
        weeks_worked: int = comparison.DEFAULT_WEEKS_WORKED,
    ) -> Decimal:
        return comparison.calculate_stipend_tax_savings(offer, federal_rate, state_rate, weeks_worked)

    # --- Operations driven by a TaxContext ---

    def state_rate_for(self, context: TaxContext) -> Decimal:
        """State rate from the filer's tax home (never the assignment state)."""
        return self.state_tax_table.rate_for(context.tax_home_state)

    def compare(self, offers: Iterable[JobOffer], context: TaxContext) -> ComparisonReport:
        """Compare offers under a filer's tax context.

        Raises:
            UnknownStateError: If the tax-home state has no rate. The
                comparison is not attempted with a guessed rate.
        """
        state_rate = self.state_rate_for(context)
        logger.debug(
            f"Comparing offers for tax home {context.tax_home_state.value} "
            f"(federal {context.federal_rate}, state {state_rate}, {context.weeks_worked} weeks)"
        )
        return comparison.compare_offers(offers, context.federal_rate, state_rate, context.weeks_worked)

    def best_offer(self, offers: Iterable[JobOffer], context: TaxContext) -> Optional[JobOffer]:
        best = self.compare(offers, context).best
        return best.offer if best else None

    def stipend_tax_savings(self, offer: JobOffer, context: TaxContext) -> Decimal:
        return comparison.calculate_stipend_tax_savings(
            offer, context.federal_rate, self.state_rate_for(context), context.weeks_worked
        )

    def check_gsa_for_location(self, offer: JobOffer) -> GSAComplianceResult:
        """GSA check using the rates for the offer's assignment locality."""
        rates = self.gsa_rates.rates_for(offer.location)
        return gsa.check_gsa_compliance(offer, rates.lodging, rates.meals)
