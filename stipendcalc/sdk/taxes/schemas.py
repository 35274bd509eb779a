"""Pydantic schemas for state tax rate files.

These schemas validate rates/state_tax_rates.yaml (or a user override) and
provide typed access to the per-state effective rates.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..schemas import to_decimal
from ..states import NO_INCOME_TAX_STATES, USState


class StateTaxRatesFile(BaseModel):
    """Complete state tax rate table for a year."""
    model_config = ConfigDict(extra="forbid")

    year: Optional[int] = Field(default=None, description="Tax year the rates describe")
    no_income_tax: List[USState] = Field(default_factory=list,
                                         description="States with no tax on wages")
    rates: Dict[USState, Decimal] = Field(..., description="Effective rate as decimal fraction")

    @field_validator("rates", mode="before")
    @classmethod
    def _coerce_rates(cls, value):
        if isinstance(value, dict):
            return {k: to_decimal(v) for k, v in value.items()}
        return value

    @model_validator(mode="after")
    def check_rates(self) -> "StateTaxRatesFile":
        """Rates must be fractions, and no-income-tax states must be zero."""
        for state, rate in self.rates.items():
            if rate < 0 or rate > 1:
                raise ValueError(f"{state.value}: rate {rate} must be between 0 and 1")

        for state in NO_INCOME_TAX_STATES.union(self.no_income_tax):
            rate = self.rates.get(state)
            if rate is not None and rate != 0:
                raise ValueError(
                    f"{state.value} has no income tax but is listed with rate {rate}"
                )
        return self
