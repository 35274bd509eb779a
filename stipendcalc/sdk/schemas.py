"""Schemas for Stipend Calc inputs and results.

Inputs (JobOffer, TaxContext) are pydantic models so offers loaded from
YAML/JSON get type coercion and reject unknown fields. Results are frozen
dataclasses: they are always recomputed from inputs and never edited.

Money values are Decimal throughout. Floats coming from YAML are converted
through str() so 0.1 becomes Decimal("0.1") rather than its binary
approximation.
"""

import datetime
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import UnknownStateError
from .states import USState, parse_state


def to_decimal(value: Any) -> Any:
    """Convert floats/ints to Decimal without binary float noise."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    return value


def _decimal_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


# =============================================================================
# Inputs
# =============================================================================


class JobOffer(BaseModel):
    """A travel nursing job offer.

    Numeric bounds (non-negative pay, positive hours and contract weeks)
    are checked by comparison.validate_offer, not here, so that one bad
    offer in a batch can be reported next to the valid ones.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, min_length=1,
                    description="Stable identifier, unchanged across edits")
    name: str = Field(default="Offer", description="Display name")
    facility_name: Optional[str] = None
    location: Optional[str] = Field(default=None, description="Assignment locality, e.g. 'Palo Alto, CA'")
    state: Optional[USState] = Field(default=None, description="Assignment state (never used for tax)")

    hourly_rate: Decimal = Field(..., description="Taxable hourly rate")
    hours_per_week: Decimal = Field(..., description="Weekly taxable hours")
    housing_stipend: Decimal = Field(default=Decimal("0"), description="Weekly housing stipend")
    meals_stipend: Decimal = Field(default=Decimal("0"), description="Weekly meals/incidentals stipend")

    overtime_rate: Optional[Decimal] = None
    overtime_hours: Decimal = Field(default=Decimal("0"), description="Expected weekly overtime hours")

    contract_weeks: int = Field(default=13, description="Contract length in weeks")
    completion_bonus: Optional[Decimal] = None
    sign_on_bonus: Optional[Decimal] = None

    @field_validator(
        "hourly_rate", "hours_per_week", "housing_stipend", "meals_stipend",
        "overtime_rate", "overtime_hours", "completion_bonus", "sign_on_bonus",
        mode="before",
    )
    @classmethod
    def _coerce_decimal(cls, value):
        return to_decimal(value)

    @field_validator("state", mode="before")
    @classmethod
    def _coerce_state(cls, value):
        if value is None:
            return None
        try:
            return parse_state(value)
        except UnknownStateError as e:
            raise ValueError(str(e))

    @property
    def weekly_stipend(self) -> Decimal:
        """Total weekly non-taxable stipend (housing + meals)."""
        return self.housing_stipend + self.meals_stipend

    @property
    def total_bonuses(self) -> Decimal:
        return (self.completion_bonus or Decimal("0")) + (self.sign_on_bonus or Decimal("0"))

    @property
    def daily_housing(self) -> Decimal:
        return self.housing_stipend / 7

    @property
    def daily_meals(self) -> Decimal:
        return self.meals_stipend / 7


class TaxContext(BaseModel):
    """Filer tax settings shared across a comparison run.

    The state rate is NOT a field: it is derived from tax_home_state by the
    engine's state tax table. Travel nurses pay state tax in their tax home,
    not where the assignment is.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    tax_home_state: USState
    federal_rate: Decimal = Field(default=Decimal("0.22"), ge=0, le=1)
    weeks_worked: int = Field(default=48, ge=1, le=52)

    @field_validator("federal_rate", mode="before")
    @classmethod
    def _coerce_decimal(cls, value):
        return to_decimal(value)

    @field_validator("tax_home_state", mode="before")
    @classmethod
    def _coerce_state(cls, value):
        try:
            return parse_state(value)
        except UnknownStateError as e:
            raise ValueError(str(e))


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class OfferComparisonResult:
    """Take-home breakdown for one offer within a comparison run."""

    offer: JobOffer
    weekly_taxable: Decimal
    weekly_tax: Decimal
    weekly_stipends: Decimal
    weekly_bonus: Decimal
    weekly_gross: Decimal
    weekly_take_home: Decimal
    annual_gross: Decimal
    annual_take_home: Decimal
    blended_rate: Decimal
    non_taxable_percentage: Decimal
    effective_tax_rate: Decimal
    rank: int = 0

    @property
    def offer_id(self) -> str:
        return self.offer.id

    @property
    def weekly_non_taxable(self) -> Decimal:
        return self.weekly_stipends + self.weekly_bonus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "offer_id": self.offer_id,
            "name": self.offer.name,
            "contract_weeks": self.offer.contract_weeks,
            "weekly": {
                "taxable": str(self.weekly_taxable),
                "tax": str(self.weekly_tax),
                "stipends": str(self.weekly_stipends),
                "bonus": str(self.weekly_bonus),
                "gross": str(self.weekly_gross),
                "take_home": str(self.weekly_take_home),
            },
            "annual": {
                "gross": str(self.annual_gross),
                "take_home": str(self.annual_take_home),
            },
            "blended_rate": str(self.blended_rate),
            "non_taxable_percentage": str(self.non_taxable_percentage),
            "effective_tax_rate": str(self.effective_tax_rate),
        }


@dataclass(frozen=True)
class RejectedOffer:
    """An offer excluded from a comparison, with the reasons."""

    offer_id: Optional[str]
    errors: Tuple[str, ...]

    @property
    def message(self) -> str:
        label = self.offer_id or "<unidentified>"
        return f"Offer '{label}': {'; '.join(self.errors)}"

    def to_dict(self) -> Dict[str, Any]:
        return {"offer_id": self.offer_id, "errors": list(self.errors)}


@dataclass(frozen=True)
class ComparisonReport:
    """Ranked comparison results plus offers skipped for invalid input."""

    results: Tuple[OfferComparisonResult, ...] = ()
    rejected: Tuple[RejectedOffer, ...] = ()

    def __iter__(self) -> Iterator[OfferComparisonResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index: int) -> OfferComparisonResult:
        return self.results[index]

    @property
    def best(self) -> Optional[OfferComparisonResult]:
        return self.results[0] if self.results else None

    @property
    def has_rejections(self) -> bool:
        return len(self.rejected) > 0

    def result_for(self, offer_id: str) -> Optional[OfferComparisonResult]:
        for result in self.results:
            if result.offer_id == offer_id:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "rejected": [r.to_dict() for r in self.rejected],
        }


@dataclass(frozen=True)
class GSAComplianceResult:
    """Weekly stipend checked against the GSA per-diem safe-harbor ceiling."""

    offer_id: str
    is_compliant: bool
    excess_amount: Decimal
    weekly_stipend: Decimal
    weekly_ceiling: Decimal
    gsa_daily_lodging: Decimal
    gsa_daily_meals: Decimal
    daily_housing: Decimal
    daily_meals: Decimal
    housing_within_limit: bool
    meals_within_limit: bool

    @property
    def housing_excess(self) -> Decimal:
        return max(Decimal("0"), self.daily_housing - self.gsa_daily_lodging)

    @property
    def meals_excess(self) -> Decimal:
        return max(Decimal("0"), self.daily_meals - self.gsa_daily_meals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "offer_id": self.offer_id,
            "is_compliant": self.is_compliant,
            "excess_amount": str(self.excess_amount),
            "weekly_stipend": str(self.weekly_stipend),
            "weekly_ceiling": str(self.weekly_ceiling),
            "gsa_daily_lodging": str(self.gsa_daily_lodging),
            "gsa_daily_meals": str(self.gsa_daily_meals),
            "housing_within_limit": self.housing_within_limit,
            "meals_within_limit": self.meals_within_limit,
        }


@dataclass(frozen=True)
class ParsedReceipt:
    """Fields recovered from raw receipt text."""

    merchant_name: Optional[str] = None
    amount: Optional[Decimal] = None
    date: Optional[datetime.date] = None
    items: Tuple[str, ...] = field(default_factory=tuple)
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "merchant_name": self.merchant_name,
            "amount": _decimal_str(self.amount),
            "date": self.date.isoformat() if self.date else None,
            "items": list(self.items),
            "confidence": self.confidence,
        }
