"""GSA per-diem compliance for weekly stipends.

Stipends above the GSA lodging + meals ceiling risk losing their
non-taxable status, so the excess is flagged as potentially taxable.

    weekly_ceiling = (gsa_daily_lodging + gsa_daily_meals) * 7

A zero ceiling flags any nonzero stipend. That only happens when locality
rates are missing, and the conservative answer is to send it for review.
"""

import logging
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .comparison import validate_offer
from .errors import InvalidInputError, RateTableError
from .schemas import GSAComplianceResult, JobOffer, to_decimal

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7

# FY2024 standard CONUS rates
DEFAULT_GSA_LODGING = Decimal("107")
DEFAULT_GSA_MEALS = Decimal("79")


class GsaRates(BaseModel):
    """Daily lodging and meals per-diem for one locality."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    lodging: Decimal = Field(..., ge=0, description="Daily lodging rate")
    meals: Decimal = Field(..., ge=0, description="Daily meals & incidentals rate")

    @field_validator("lodging", "meals", mode="before")
    @classmethod
    def _coerce_decimal(cls, value):
        return to_decimal(value)

    @property
    def weekly_ceiling(self) -> Decimal:
        return (self.lodging + self.meals) * DAYS_PER_WEEK


STANDARD_GSA_RATES = GsaRates(lodging=DEFAULT_GSA_LODGING, meals=DEFAULT_GSA_MEALS)


class GsaRatesFile(BaseModel):
    """Schema for rates/gsa_per_diem.yaml."""
    model_config = ConfigDict(extra="forbid")

    fiscal_year: Optional[int] = None
    standard: GsaRates = STANDARD_GSA_RATES
    localities: Dict[str, GsaRates] = Field(default_factory=dict)


def normalize_locality(location: str) -> str:
    """Lower-case a locality and collapse whitespace around commas."""
    parts = [part.strip() for part in location.split(",")]
    return ", ".join(" ".join(part.split()) for part in parts if part).lower()


class GsaRateTable:
    """Locality to per-diem lookup with the standard rate as fallback.

    Falling back is correct here: GSA publishes the standard CONUS rate for
    every locality without its own entry.
    """

    def __init__(
        self,
        localities: Optional[Mapping[str, GsaRates]] = None,
        standard: GsaRates = STANDARD_GSA_RATES,
        fiscal_year: Optional[int] = None,
    ):
        self._localities = MappingProxyType(
            {normalize_locality(k): v for k, v in (localities or {}).items()}
        )
        self.standard = standard
        self.fiscal_year = fiscal_year

    @property
    def localities(self) -> list:
        return sorted(self._localities)

    def rates_for(self, location: Optional[str]) -> GsaRates:
        if not location:
            return self.standard
        rates = self._localities.get(normalize_locality(location))
        if rates is None:
            logger.debug(f"No GSA locality entry for '{location}', using standard rate")
            return self.standard
        return rates

    def with_standard(self, standard: GsaRates) -> "GsaRateTable":
        """Copy of this table with a different fallback rate."""
        return GsaRateTable(dict(self._localities), standard, self.fiscal_year)

    @classmethod
    def from_dict(cls, data: dict) -> "GsaRateTable":
        try:
            parsed = GsaRatesFile.model_validate(data or {})
        except ValidationError as e:
            raise RateTableError(f"Invalid GSA rate table: {e}") from e
        return cls(parsed.localities, parsed.standard, parsed.fiscal_year)


def get_default_gsa_rates_path() -> Path:
    return Path(__file__).parent.parent / "rates" / "gsa_per_diem.yaml"


def load_gsa_rate_table(path: Optional[Path] = None) -> GsaRateTable:
    """Load GSA per-diem rates from YAML (packaged default if path is None)."""
    rates_file = Path(path) if path else get_default_gsa_rates_path()
    if not rates_file.exists():
        raise FileNotFoundError(f"GSA rate file not found: {rates_file}")

    with open(rates_file, "r") as f:
        data = yaml.safe_load(f)

    table = GsaRateTable.from_dict(data)
    logger.debug(f"Loaded {len(table.localities)} GSA localities from {rates_file}")
    return table


def check_gsa_compliance(
    offer: JobOffer,
    gsa_daily_lodging: Decimal,
    gsa_daily_meals: Decimal,
) -> GSAComplianceResult:
    """Check an offer's weekly stipend against the GSA weekly ceiling.

    Args:
        offer: Offer whose housing + meals stipend is checked
        gsa_daily_lodging: GSA daily lodging rate for the locality
        gsa_daily_meals: GSA daily meals & incidentals rate

    Returns:
        GSAComplianceResult; excess_amount is the stipend above the ceiling
        (0 when compliant).

    Raises:
        InvalidInputError: If GSA rates are negative or the offer is invalid.
    """
    lodging = to_decimal(gsa_daily_lodging)
    meals = to_decimal(gsa_daily_meals)

    errors = validate_offer(offer)
    for name, rate in (("gsa_daily_lodging", lodging), ("gsa_daily_meals", meals)):
        if not isinstance(rate, Decimal) or not rate.is_finite():
            errors.append(f"{name} must be a finite decimal")
        elif rate < 0:
            errors.append(f"{name} must not be negative (got {rate})")
    if errors:
        raise InvalidInputError(errors, offer_id=offer.id)

    ceiling = (lodging + meals) * DAYS_PER_WEEK
    stipend = offer.weekly_stipend
    is_compliant = stipend <= ceiling
    excess = Decimal("0") if is_compliant else stipend - ceiling

    if not is_compliant:
        logger.debug(f"Offer '{offer.id}' stipend {stipend} exceeds GSA ceiling {ceiling} by {excess}")

    return GSAComplianceResult(
        offer_id=offer.id,
        is_compliant=is_compliant,
        excess_amount=excess,
        weekly_stipend=stipend,
        weekly_ceiling=ceiling,
        gsa_daily_lodging=lodging,
        gsa_daily_meals=meals,
        daily_housing=offer.daily_housing,
        daily_meals=offer.daily_meals,
        housing_within_limit=offer.housing_stipend <= lodging * DAYS_PER_WEEK,
        meals_within_limit=offer.meals_stipend <= meals * DAYS_PER_WEEK,
    )
