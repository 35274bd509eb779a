"""US state codes used for tax-home and assignment locations."""

from enum import Enum
from typing import Union

from .errors import UnknownStateError


class USState(str, Enum):
    """Two-letter postal code for the 50 states plus DC."""

    ALABAMA = "AL"
    ALASKA = "AK"
    ARIZONA = "AZ"
    ARKANSAS = "AR"
    CALIFORNIA = "CA"
    COLORADO = "CO"
    CONNECTICUT = "CT"
    DELAWARE = "DE"
    FLORIDA = "FL"
    GEORGIA = "GA"
    HAWAII = "HI"
    IDAHO = "ID"
    ILLINOIS = "IL"
    INDIANA = "IN"
    IOWA = "IA"
    KANSAS = "KS"
    KENTUCKY = "KY"
    LOUISIANA = "LA"
    MAINE = "ME"
    MARYLAND = "MD"
    MASSACHUSETTS = "MA"
    MICHIGAN = "MI"
    MINNESOTA = "MN"
    MISSISSIPPI = "MS"
    MISSOURI = "MO"
    MONTANA = "MT"
    NEBRASKA = "NE"
    NEVADA = "NV"
    NEW_HAMPSHIRE = "NH"
    NEW_JERSEY = "NJ"
    NEW_MEXICO = "NM"
    NEW_YORK = "NY"
    NORTH_CAROLINA = "NC"
    NORTH_DAKOTA = "ND"
    OHIO = "OH"
    OKLAHOMA = "OK"
    OREGON = "OR"
    PENNSYLVANIA = "PA"
    RHODE_ISLAND = "RI"
    SOUTH_CAROLINA = "SC"
    SOUTH_DAKOTA = "SD"
    TENNESSEE = "TN"
    TEXAS = "TX"
    UTAH = "UT"
    VERMONT = "VT"
    VIRGINIA = "VA"
    WASHINGTON = "WA"
    WEST_VIRGINIA = "WV"
    WISCONSIN = "WI"
    WYOMING = "WY"
    DISTRICT_OF_COLUMBIA = "DC"

    @property
    def full_name(self) -> str:
        """Display name, e.g. 'North Carolina'."""
        if self is USState.DISTRICT_OF_COLUMBIA:
            return "District of Columbia"
        return self.name.replace("_", " ").title()

    @property
    def has_no_income_tax(self) -> bool:
        return self in NO_INCOME_TAX_STATES


# States that levy no tax on wages. Their rate is always exactly zero.
NO_INCOME_TAX_STATES = frozenset({
    USState.TEXAS,
    USState.FLORIDA,
    USState.WASHINGTON,
    USState.NEVADA,
    USState.WYOMING,
    USState.SOUTH_DAKOTA,
    USState.ALASKA,
})


def parse_state(value: Union[USState, str]) -> USState:
    """Resolve a USState from an enum, postal code or full name.

    Matching is case-insensitive: "tx", "TX", "Texas" and "texas" all
    resolve to USState.TEXAS.

    Raises:
        UnknownStateError: If the value names no state.
    """
    if isinstance(value, USState):
        return value
    if not isinstance(value, str) or not value.strip():
        raise UnknownStateError(value)

    text = value.strip()
    try:
        return USState(text.upper())
    except ValueError:
        pass

    normalized = text.lower().replace("_", " ")
    for state in USState:
        if state.full_name.lower() == normalized:
            return state

    raise UnknownStateError(value)
