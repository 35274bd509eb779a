"""Offer comparison and stipend tax calculations.

Pure functions over JobOffer inputs. Nothing here reads files, caches or
holds state: the same inputs always produce the same ranked results.

Take-home model (per week):
    taxable     = hourly_rate * hours_per_week + overtime_rate * overtime_hours
    tax         = taxable * clamp(federal_rate + state_rate, 0, 1)
    non_taxable = housing + meals stipends + bonuses / contract_weeks
    take_home   = taxable - tax + non_taxable

Stipends are never taxed. Annual figures multiply by weeks worked.

Batch policy is skip-and-report: an invalid offer is left out of the
ranking and listed in ComparisonReport.rejected with its errors.
"""

import logging
from dataclasses import replace
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Iterable, List, Optional

from .errors import InvalidInputError
from .schemas import (
    ComparisonReport,
    JobOffer,
    OfferComparisonResult,
    RejectedOffer,
    to_decimal,
)
from .taxes.federal import combined_rate

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
# Amortized bonuses are held to this scale so later sums stay exact.
BONUS_SCALE = Decimal("0.0001")

DEFAULT_WEEKS_WORKED = 48
MAX_WEEKS_PER_YEAR = 52


# =============================================================================
# VALIDATION
# =============================================================================


def _check_amount(errors: List[str], name: str, value: Optional[Decimal], positive: bool = False) -> None:
    if value is None:
        return
    if not value.is_finite():
        errors.append(f"{name} must be a finite number")
    elif positive and value <= 0:
        errors.append(f"{name} must be greater than 0 (got {value})")
    elif value < 0:
        errors.append(f"{name} must not be negative (got {value})")


def validate_offer(offer: JobOffer) -> List[str]:
    """Check an offer's amounts, hours and contract length.

    Returns:
        List of error strings (empty if the offer is valid).
    """
    errors: List[str] = []
    _check_amount(errors, "hourly_rate", offer.hourly_rate)
    _check_amount(errors, "hours_per_week", offer.hours_per_week, positive=True)
    _check_amount(errors, "housing_stipend", offer.housing_stipend)
    _check_amount(errors, "meals_stipend", offer.meals_stipend)
    _check_amount(errors, "overtime_rate", offer.overtime_rate)
    _check_amount(errors, "overtime_hours", offer.overtime_hours)
    _check_amount(errors, "completion_bonus", offer.completion_bonus)
    _check_amount(errors, "sign_on_bonus", offer.sign_on_bonus)
    if offer.contract_weeks <= 0:
        errors.append(f"contract_weeks must be greater than 0 (got {offer.contract_weeks})")
    return errors


def validate_tax_inputs(federal_rate: Decimal, state_rate: Decimal, weeks_worked: int) -> List[str]:
    """Check the rates and weeks shared by every offer in a run."""
    errors: List[str] = []
    for name, rate in (("federal_rate", federal_rate), ("state_rate", state_rate)):
        if not isinstance(rate, Decimal) or not rate.is_finite():
            errors.append(f"{name} must be a finite decimal")
        elif rate < 0 or rate > 1:
            errors.append(f"{name} must be between 0 and 1 (got {rate})")
    if isinstance(weeks_worked, bool) or not isinstance(weeks_worked, int):
        errors.append(f"weeks_worked must be an integer (got {weeks_worked!r})")
    elif weeks_worked < 1 or weeks_worked > MAX_WEEKS_PER_YEAR:
        errors.append(f"weeks_worked must be between 1 and {MAX_WEEKS_PER_YEAR} (got {weeks_worked})")
    return errors


def _require_valid_offer(offer: JobOffer) -> None:
    errors = validate_offer(offer)
    if errors:
        raise InvalidInputError(errors, offer_id=offer.id)


def _require_valid_tax_inputs(federal_rate: Decimal, state_rate: Decimal, weeks_worked: int) -> None:
    errors = validate_tax_inputs(federal_rate, state_rate, weeks_worked)
    if errors:
        raise InvalidInputError(errors)


# =============================================================================
# WEEKLY / ANNUAL ARITHMETIC
# =============================================================================


def calculate_weekly_taxable(offer: JobOffer) -> Decimal:
    """Regular plus overtime wages for one week."""
    regular = offer.hourly_rate * offer.hours_per_week
    overtime = (offer.overtime_rate or ZERO) * offer.overtime_hours
    return regular + overtime


def calculate_weekly_bonus(offer: JobOffer) -> Decimal:
    """Bonuses spread evenly over the contract, to four decimal places."""
    if offer.contract_weeks <= 0 or not offer.total_bonuses:
        return ZERO
    return (offer.total_bonuses / offer.contract_weeks).quantize(BONUS_SCALE, rounding=ROUND_HALF_EVEN)


def calculate_weekly_take_home(offer: JobOffer, federal_rate: Decimal, state_rate: Decimal) -> Decimal:
    """Weekly take-home pay; tax applies to wages only, never to stipends."""
    taxable = calculate_weekly_taxable(offer)
    tax = taxable * combined_rate(federal_rate, state_rate)
    return taxable - tax + offer.weekly_stipend + calculate_weekly_bonus(offer)


def calculate_blended_rate(offer: JobOffer) -> Decimal:
    """Weekly gross divided by weekly hours (0 when hours are 0)."""
    if offer.hours_per_week <= 0:
        return ZERO
    gross = calculate_weekly_taxable(offer) + offer.weekly_stipend + calculate_weekly_bonus(offer)
    return gross / offer.hours_per_week


def _compute_result(
    offer: JobOffer,
    federal_rate: Decimal,
    state_rate: Decimal,
    weeks_worked: int,
) -> OfferComparisonResult:
    taxable = calculate_weekly_taxable(offer)
    tax = taxable * combined_rate(federal_rate, state_rate)
    stipends = offer.weekly_stipend
    bonus = calculate_weekly_bonus(offer)
    gross = taxable + stipends + bonus
    take_home = taxable - tax + stipends + bonus

    if gross > 0:
        non_taxable_pct = (stipends + bonus) / gross * HUNDRED
        effective_rate = tax / gross * HUNDRED
    else:
        non_taxable_pct = ZERO
        effective_rate = ZERO

    return OfferComparisonResult(
        offer=offer,
        weekly_taxable=taxable,
        weekly_tax=tax,
        weekly_stipends=stipends,
        weekly_bonus=bonus,
        weekly_gross=gross,
        weekly_take_home=take_home,
        annual_gross=gross * weeks_worked,
        annual_take_home=take_home * weeks_worked,
        blended_rate=calculate_blended_rate(offer),
        non_taxable_percentage=non_taxable_pct,
        effective_tax_rate=effective_rate,
    )


def _ranking_key(result: OfferComparisonResult):
    # Highest annual take-home first; ties go to the shorter contract, then id.
    return (-result.annual_take_home, result.offer.contract_weeks, result.offer_id)


# =============================================================================
# PUBLIC OPERATIONS
# =============================================================================


def compare_offers(
    offers: Iterable[JobOffer],
    federal_rate: Decimal,
    state_rate: Decimal,
    weeks_worked: int = DEFAULT_WEEKS_WORKED,
) -> ComparisonReport:
    """Rank offers by annual take-home pay.

    Args:
        offers: Offers to compare (may be empty)
        federal_rate: Federal effective rate, decimal fraction in [0, 1]
        state_rate: Tax-home state effective rate in [0, 1]
        weeks_worked: Weeks worked per year, 1..52

    Returns:
        ComparisonReport with results in rank order (rank 1 = best) and any
        offers rejected for invalid input.

    Raises:
        InvalidInputError: If the rates or weeks are malformed. Per-offer
            problems never raise; they are reported in `rejected`.
    """
    federal_rate, state_rate = to_decimal(federal_rate), to_decimal(state_rate)
    _require_valid_tax_inputs(federal_rate, state_rate, weeks_worked)

    computed: List[OfferComparisonResult] = []
    rejected: List[RejectedOffer] = []
    seen_ids = set()

    for offer in offers:
        errors = validate_offer(offer)
        if offer.id in seen_ids:
            errors.append(f"duplicate offer id '{offer.id}'")
        if errors:
            logger.warning(f"Skipping offer '{offer.id}': {'; '.join(errors)}")
            rejected.append(RejectedOffer(offer_id=offer.id, errors=tuple(errors)))
            continue
        seen_ids.add(offer.id)
        computed.append(_compute_result(offer, federal_rate, state_rate, weeks_worked))

    computed.sort(key=_ranking_key)
    ranked = tuple(
        replace(result, rank=index + 1)
        for index, result in enumerate(computed)
    )

    logger.debug(f"Compared {len(ranked)} offer(s), rejected {len(rejected)}")
    return ComparisonReport(results=ranked, rejected=tuple(rejected))


def find_best_offer(
    offers: Iterable[JobOffer],
    federal_rate: Decimal,
    state_rate: Decimal,
    weeks_worked: int = DEFAULT_WEEKS_WORKED,
) -> Optional[JobOffer]:
    """The first-ranked offer, or None when no valid offer was given."""
    report = compare_offers(offers, federal_rate, state_rate, weeks_worked)
    return report.best.offer if report.best else None


def calculate_stipend_tax_savings(
    offer: JobOffer,
    federal_rate: Decimal,
    state_rate: Decimal,
    weeks_worked: int = DEFAULT_WEEKS_WORKED,
) -> Decimal:
    """Estimate tax avoided by receiving stipends instead of taxable wages.

    Holding total compensation constant, the stipend portion escapes the
    combined rate. This is an illustrative estimate, not a filing figure.
    Because the combined rate is clamped to 1, weekly savings never exceed
    the weekly stipend.

    Example:
        $2,500/wk stipend at 22% + 5% over 48 weeks -> 2500 * 0.27 * 48 = 32400

    Raises:
        InvalidInputError: If the offer, rates or weeks are malformed.
    """
    federal_rate, state_rate = to_decimal(federal_rate), to_decimal(state_rate)
    _require_valid_tax_inputs(federal_rate, state_rate, weeks_worked)
    _require_valid_offer(offer)
    return offer.weekly_stipend * combined_rate(federal_rate, state_rate) * weeks_worked
