"""State income tax rate lookup.

The rate table is data, not code: the packaged default lives in
rates/state_tax_rates.yaml and a user file can replace it so rates are
updated yearly without code changes. The table is passed explicitly to
whatever needs it; there is no module-level singleton.
"""

import logging
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from ..errors import RateTableError, UnknownStateError
from ..states import NO_INCOME_TAX_STATES, USState, parse_state
from .schemas import StateTaxRatesFile

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _get_rates_dir() -> Path:
    """Get the packaged rates/ directory."""
    return Path(__file__).parent.parent.parent / "rates"  # taxes -> sdk -> stipendcalc


def get_default_state_rates_path() -> Path:
    return _get_rates_dir() / "state_tax_rates.yaml"


class StateTaxTable:
    """Immutable mapping of tax-home state to effective income tax rate."""

    def __init__(
        self,
        rates: Mapping[USState, Decimal],
        no_income_tax: Iterable[USState] = (),
        year: Optional[int] = None,
    ):
        self._rates = MappingProxyType(dict(rates))
        self._no_income_tax = frozenset(NO_INCOME_TAX_STATES.union(no_income_tax))
        self.year = year

    @property
    def no_income_tax_states(self) -> frozenset:
        return self._no_income_tax

    @property
    def states(self) -> list:
        """States with a configured rate, sorted by postal code."""
        return sorted(self._rates, key=lambda s: s.value)

    def __contains__(self, state) -> bool:
        try:
            return parse_state(state) in self._rates
        except UnknownStateError:
            return False

    def rate_for(self, state: Union[USState, str]) -> Decimal:
        """Effective rate for a tax-home state.

        No-income-tax states always return exactly 0, even if the table
        omits them.

        Raises:
            UnknownStateError: If the state is unparseable or not in the table.
        """
        resolved = parse_state(state)
        if resolved in self._no_income_tax:
            return ZERO
        if resolved not in self._rates:
            raise UnknownStateError(resolved.value)
        return self._rates[resolved]

    @classmethod
    def from_dict(cls, data: dict) -> "StateTaxTable":
        """Build a table from a parsed rates document.

        Raises:
            RateTableError: If the document fails validation.
        """
        try:
            parsed = StateTaxRatesFile.model_validate(data or {})
        except ValidationError as e:
            raise RateTableError(f"Invalid state tax rate table: {e}") from e
        return cls(parsed.rates, parsed.no_income_tax, parsed.year)


def load_state_tax_table(path: Optional[Path] = None) -> StateTaxTable:
    """Load a state tax table from YAML (packaged default if path is None)."""
    rates_file = Path(path) if path else get_default_state_rates_path()
    if not rates_file.exists():
        raise FileNotFoundError(f"State tax rate file not found: {rates_file}")

    with open(rates_file, "r") as f:
        data = yaml.safe_load(f)

    table = StateTaxTable.from_dict(data)
    logger.debug(f"Loaded {len(table.states)} state tax rates from {rates_file}")
    return table


def get_state_tax_rate(
    state: Union[USState, str],
    table: Optional[StateTaxTable] = None,
) -> Decimal:
    """Get the effective state tax rate for a tax-home state.

    Args:
        state: USState, postal code ("CA") or full name ("California")
        table: Rate table to use (packaged default if None)

    Returns:
        Rate as a decimal fraction; exactly 0 for no-income-tax states.

    Raises:
        UnknownStateError: If the state has no entry. There is no fallback
            rate, since a guessed rate would misstate tax liability.
    """
    if table is None:
        table = load_state_tax_table()
    return table.rate_for(state)
