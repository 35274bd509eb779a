"""Federal rate helpers for take-home estimates."""

from decimal import Decimal
from typing import Union

ZERO = Decimal("0")
ONE = Decimal("1")

# 2024 federal brackets, single filer.
# Format: (taxable_income_up_to, marginal_rate)
FEDERAL_TAX_BRACKETS_2024 = [
    (Decimal("11600"), Decimal("0.10")),
    (Decimal("47150"), Decimal("0.12")),
    (Decimal("100525"), Decimal("0.22")),
    (Decimal("191950"), Decimal("0.24")),
    (Decimal("243725"), Decimal("0.32")),
    (Decimal("609350"), Decimal("0.35")),
]
TOP_FEDERAL_RATE = Decimal("0.37")


def estimate_federal_tax_bracket(annual_income: Union[Decimal, int, str]) -> Decimal:
    """Marginal federal rate for an annual taxable income.

    Example:
        estimate_federal_tax_bracket(75000)  # -> Decimal("0.22")
    """
    income = Decimal(str(annual_income))
    for threshold, rate in FEDERAL_TAX_BRACKETS_2024:
        if income <= threshold:
            return rate
    return TOP_FEDERAL_RATE


def clamp_rate(rate: Decimal) -> Decimal:
    """Clamp a derived rate to [0, 1]."""
    return min(max(rate, ZERO), ONE)


def combined_rate(federal_rate: Decimal, state_rate: Decimal) -> Decimal:
    """Federal + state rate, clamped so tax never exceeds taxable wages."""
    return clamp_rate(federal_rate + state_rate)
