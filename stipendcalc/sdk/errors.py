"""Exception hierarchy for Stipend Calc.

Every failure the SDK raises derives from StipendCalcError so callers
(CLI, MCP server) can catch one type and report it.
"""

from typing import List


class StipendCalcError(Exception):
    """Base exception for all Stipend Calc errors."""
    pass


class UnknownStateError(StipendCalcError):
    """Raised when a tax-home state has no entry in the rate table."""

    def __init__(self, state):
        self.state = state
        super().__init__(f"No state tax rate configured for '{state}'")


class InvalidInputError(StipendCalcError):
    """Raised when rates, hours, weeks or amounts are malformed."""

    def __init__(self, errors: List[str], offer_id: str = None):
        self.errors = errors
        self.offer_id = offer_id
        prefix = f"Offer '{offer_id}': " if offer_id else ""
        super().__init__(f"{prefix}{'; '.join(errors)}")


class RateTableError(StipendCalcError):
    """Raised when a state tax or GSA rate file fails validation."""
    pass


class ConfigError(StipendCalcError):
    """Raised for invalid settings or offers files."""
    pass


class ReceiptTextError(StipendCalcError):
    """Raised when no text can be read from a receipt document."""
    pass
