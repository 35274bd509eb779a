"""taxes - State and federal rate lookups.

Scope:
- State effective rates by tax-home state (state_rates)
- Federal bracket estimation and combined-rate clamping (federal)

Constraints:
- Pure lookup/arithmetic - tables are passed in, never global
- Rate data loaded from rates/*.yaml (or a user override file)

Usage:
    from stipendcalc.sdk.taxes import load_state_tax_table, get_state_tax_rate

    table = load_state_tax_table()
    rate = get_state_tax_rate("CA", table)
"""

from .federal import (
    FEDERAL_TAX_BRACKETS_2024,
    TOP_FEDERAL_RATE,
    clamp_rate,
    combined_rate,
    estimate_federal_tax_bracket,
)

from .schemas import StateTaxRatesFile

from .state_rates import (
    StateTaxTable,
    get_default_state_rates_path,
    get_state_tax_rate,
    load_state_tax_table,
)

__all__ = [
    # Federal
    "FEDERAL_TAX_BRACKETS_2024",
    "TOP_FEDERAL_RATE",
    "clamp_rate",
    "combined_rate",
    "estimate_federal_tax_bracket",
    # State
    "StateTaxRatesFile",
    "StateTaxTable",
    "get_default_state_rates_path",
    "get_state_tax_rate",
    "load_state_tax_table",
]
