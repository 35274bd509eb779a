"""Configuration management for Stipend Calc.

settings.json holds the filer's defaults so commands don't need them on
every run:
   - tax_home_state: postal code of the IRS tax home (drives state rate)
   - federal_rate: federal effective rate as a decimal fraction
   - weeks_worked: weeks worked per year for annual figures
   - gsa_daily_lodging / gsa_daily_meals: per-diem used when no locality rate applies
   - state_tax_rates_file / gsa_rates_file: optional rate table overrides

Config directory resolution:
1. STIPEND_CALC_CONFIG_PATH environment variable (if set)
2. $XDG_CONFIG_HOME/stipend-calc/ (default ~/.config/stipend-calc/)

Offers are kept in a YAML file passed on the command line:

    offers:
      - id: stanford
        name: Stanford Medical
        hourly_rate: 42
        hours_per_week: 36
        housing_stipend: 2100
        meals_stipend: 553
        contract_weeks: 13
"""

import json
import logging
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from .errors import ConfigError, UnknownStateError
from .gsa import GsaRates, GsaRateTable, load_gsa_rate_table
from .schemas import JobOffer, RejectedOffer, TaxContext
from .states import parse_state
from .taxes.state_rates import StateTaxTable, load_state_tax_table

logger = logging.getLogger(__name__)

APP_NAME = "stipend-calc"
SETTINGS_FILENAME = "settings.json"

DEFAULT_SETTINGS = {
    "tax_home_state": "TX",
    "federal_rate": "0.22",
    "weeks_worked": 48,
    # None: the GSA rate table's own standard rate applies
    "gsa_daily_lodging": None,
    "gsa_daily_meals": None,
    "state_tax_rates_file": None,
    "gsa_rates_file": None,
}


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. STIPEND_CALC_CONFIG_PATH environment variable
    2. ~/.config/stipend-calc/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("STIPEND_CALC_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)

    Raises:
        ConfigError: If the file is not valid JSON.
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid settings file {settings_file}: {e}") from e


def save_settings(settings: dict) -> Path:
    """Save settings.json, creating the config directory if needed."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_effective_settings() -> dict:
    """Defaults overlaid with whatever settings.json defines."""
    return {**DEFAULT_SETTINGS, **load_settings()}


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value, falling back to the built-in default."""
    settings = get_effective_settings()
    value = settings.get(key)
    return default if value is None else value


def _validate_setting(key: str, value: Any) -> Any:
    """Normalize a setting value, raising ConfigError if it is invalid."""
    if key not in DEFAULT_SETTINGS:
        known = ", ".join(sorted(DEFAULT_SETTINGS))
        raise ConfigError(f"Unknown setting '{key}'. Known settings: {known}")

    if key == "tax_home_state":
        try:
            return parse_state(value).value
        except UnknownStateError as e:
            raise ConfigError(str(e)) from e

    if key == "weeks_worked":
        try:
            weeks = int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"weeks_worked must be a whole number (got {value!r})")
        if weeks < 1 or weeks > 52:
            raise ConfigError(f"weeks_worked must be between 1 and 52 (got {weeks})")
        return weeks

    if key in ("federal_rate", "gsa_daily_lodging", "gsa_daily_meals"):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            raise ConfigError(f"{key} must be a number (got {value!r})")
        if not number.is_finite() or number < 0:
            raise ConfigError(f"{key} must not be negative (got {value!r})")
        if key == "federal_rate" and number > 1:
            raise ConfigError(f"federal_rate is a fraction, e.g. 0.22 (got {value!r})")
        return str(number)

    # Rate table file overrides
    path = Path(str(value)).expanduser()
    if not path.exists():
        raise ConfigError(f"{key}: file not found: {path}")
    return str(path.resolve())


def set_setting(key: str, value: Any) -> Path:
    """Validate and store a setting value in settings.json."""
    settings = load_settings()
    settings[key] = _validate_setting(key, value)
    return save_settings(settings)


def unset_setting(key: str) -> bool:
    """Remove a setting so its default applies. Returns True if it was set."""
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True


# =============================================================================
# Derived configuration
# =============================================================================


def load_tax_context(
    tax_home_state: Optional[str] = None,
    federal_rate: Optional[str] = None,
    weeks_worked: Optional[int] = None,
) -> TaxContext:
    """Build a TaxContext from explicit values, falling back to settings.

    Raises:
        ConfigError: If the combined values are invalid.
    """
    settings = get_effective_settings()
    try:
        return TaxContext(
            tax_home_state=tax_home_state or settings["tax_home_state"],
            federal_rate=federal_rate if federal_rate is not None else settings["federal_rate"],
            weeks_worked=weeks_worked if weeks_worked is not None else settings["weeks_worked"],
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid tax settings: {e}") from e


def load_configured_state_tax_table() -> StateTaxTable:
    """State tax table from the settings override, or the packaged default."""
    override = get_effective_settings().get("state_tax_rates_file")
    return load_state_tax_table(Path(override) if override else None)


def load_configured_gsa_rate_table() -> GsaRateTable:
    """GSA rate table from the settings override, or the packaged default.

    gsa_daily_lodging / gsa_daily_meals, when set in settings.json, replace
    the table's standard rate used for localities without their own entry.
    """
    settings = get_effective_settings()
    override = settings.get("gsa_rates_file")
    table = load_gsa_rate_table(Path(override) if override else None)

    if settings.get("gsa_daily_lodging") is None and settings.get("gsa_daily_meals") is None:
        return table

    try:
        standard = GsaRates(
            lodging=settings.get("gsa_daily_lodging") or table.standard.lodging,
            meals=settings.get("gsa_daily_meals") or table.standard.meals,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid GSA settings: {e}") from e
    logger.debug(f"Using GSA standard rate from settings: {standard.lodging} + {standard.meals}")
    return table.with_standard(standard)


def load_offers(path: Path) -> Tuple[List[JobOffer], List[RejectedOffer]]:
    """Load job offers from a YAML file.

    Entries that fail schema validation are returned as RejectedOffer rather
    than aborting the load, matching the skip-and-report comparison policy.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigError: If the document isn't a mapping with an 'offers' list.
    """
    offers_file = Path(path)
    if not offers_file.exists():
        raise FileNotFoundError(f"Offers file not found: {offers_file}")

    with open(offers_file, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {offers_file}: {e}") from e

    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict) and isinstance(data.get("offers"), list):
        entries = data["offers"]
    else:
        raise ConfigError(f"{offers_file} must contain an 'offers' list")

    offers, rejected = parse_offer_entries(entries, source=str(offers_file))
    logger.debug(f"Loaded {len(offers)} offer(s) from {offers_file}, rejected {len(rejected)}")
    return offers, rejected


def parse_offer_entries(
    entries: List[Any],
    source: str = "input",
) -> Tuple[List[JobOffer], List[RejectedOffer]]:
    """Validate raw offer mappings, splitting them into offers and rejections.

    Integer ids are accepted and converted to strings.
    """
    offers: List[JobOffer] = []
    rejected: List[RejectedOffer] = []

    for index, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            rejected.append(RejectedOffer(offer_id=None, errors=(f"entry {index} is not a mapping",)))
            continue
        offer_id = str(entry["id"]) if entry.get("id") is not None else None
        try:
            offers.append(parse_offer_entry(entry))
        except ValidationError as e:
            errors = tuple(
                f"{'.'.join(str(p) for p in err['loc']) or 'offer'}: {err['msg']}"
                for err in e.errors()
            )
            logger.warning(f"Skipping offer entry {index} in {source}: {'; '.join(errors)}")
            rejected.append(RejectedOffer(offer_id=offer_id, errors=errors))

    return offers, rejected


def parse_offer_entry(entry: dict) -> JobOffer:
    """Validate one raw offer mapping, converting an integer id to a string.

    Raises:
        pydantic.ValidationError: If the mapping doesn't match JobOffer
    """
    if entry.get("id") is not None:
        entry = {**entry, "id": str(entry["id"])}
    return JobOffer.model_validate(entry)
