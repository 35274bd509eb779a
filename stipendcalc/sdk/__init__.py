"""Stipend Calc SDK - Core functionality for comparing travel nursing offers."""

from .errors import (
    StipendCalcError,
    UnknownStateError,
    InvalidInputError,
    RateTableError,
    ConfigError,
    ReceiptTextError,
)

from .states import (
    USState,
    NO_INCOME_TAX_STATES,
    parse_state,
)

from .schemas import (
    JobOffer,
    TaxContext,
    OfferComparisonResult,
    RejectedOffer,
    ComparisonReport,
    GSAComplianceResult,
    ParsedReceipt,
    to_decimal,
)

from .taxes import (
    StateTaxTable,
    load_state_tax_table,
    get_state_tax_rate,
    estimate_federal_tax_bracket,
    combined_rate,
)

from .comparison import (
    compare_offers,
    find_best_offer,
    calculate_stipend_tax_savings,
    calculate_weekly_take_home,
    calculate_blended_rate,
    validate_offer,
    DEFAULT_WEEKS_WORKED,
)

from .gsa import (
    GsaRates,
    GsaRateTable,
    STANDARD_GSA_RATES,
    load_gsa_rate_table,
    check_gsa_compliance,
)

from .engine import OfferComparisonEngine

from .receipts import (
    parse_receipt_text,
    read_receipt_text,
)

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_effective_settings,
    get_setting,
    set_setting,
    unset_setting,
    load_tax_context,
    load_configured_state_tax_table,
    load_configured_gsa_rate_table,
    load_offers,
    parse_offer_entries,
    parse_offer_entry,
    DEFAULT_SETTINGS,
)

__all__ = [
    # Errors
    "StipendCalcError",
    "UnknownStateError",
    "InvalidInputError",
    "RateTableError",
    "ConfigError",
    "ReceiptTextError",
    # States
    "USState",
    "NO_INCOME_TAX_STATES",
    "parse_state",
    # Schemas
    "JobOffer",
    "TaxContext",
    "OfferComparisonResult",
    "RejectedOffer",
    "ComparisonReport",
    "GSAComplianceResult",
    "ParsedReceipt",
    "to_decimal",
    # Taxes
    "StateTaxTable",
    "load_state_tax_table",
    "get_state_tax_rate",
    "estimate_federal_tax_bracket",
    "combined_rate",
    # Comparison
    "compare_offers",
    "find_best_offer",
    "calculate_stipend_tax_savings",
    "calculate_weekly_take_home",
    "calculate_blended_rate",
    "validate_offer",
    "DEFAULT_WEEKS_WORKED",
    # GSA
    "GsaRates",
    "GsaRateTable",
    "STANDARD_GSA_RATES",
    "load_gsa_rate_table",
    "check_gsa_compliance",
    # Engine
    "OfferComparisonEngine",
    # Receipts
    "parse_receipt_text",
    "read_receipt_text",
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_effective_settings",
    "get_setting",
    "set_setting",
    "unset_setting",
    "load_tax_context",
    "load_configured_state_tax_table",
    "load_configured_gsa_rate_table",
    "load_offers",
    "parse_offer_entries",
    "parse_offer_entry",
    "DEFAULT_SETTINGS",
]
