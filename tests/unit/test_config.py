"""Tests for settings and offers file loading.

Uses isolated directories via tmp_path and STIPEND_CALC_CONFIG_PATH
to avoid touching real settings.
"""

import json
from decimal import Decimal

import pytest
import yaml

from stipendcalc.sdk.config import (
    DEFAULT_SETTINGS,
    get_config_dir,
    get_setting,
    load_configured_gsa_rate_table,
    load_configured_state_tax_table,
    load_offers,
    load_settings,
    load_tax_context,
    parse_offer_entries,
    parse_offer_entry,
    set_setting,
    unset_setting,
)
from stipendcalc.sdk.errors import ConfigError
from stipendcalc.sdk.states import USState


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Point the SDK at an empty config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("STIPEND_CALC_CONFIG_PATH", str(config_dir))
    return {"config_dir": config_dir, "tmp_path": tmp_path}


def write_offers(path, offers):
    path.write_text(yaml.dump({"offers": offers}))
    return path


class TestConfigDir:

    def test_env_override(self, isolated_env):
        assert get_config_dir() == isolated_env["config_dir"]

    def test_xdg_default(self, tmp_path, monkeypatch):
        monkeypatch.delenv("STIPEND_CALC_CONFIG_PATH", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert get_config_dir() == tmp_path / "stipend-calc"


class TestSettings:
    """Tests for settings.json round-trips and validation."""

    def test_defaults_when_no_file(self, isolated_env):
        assert load_settings() == {}
        assert get_setting("tax_home_state") == "TX"
        assert get_setting("weeks_worked") == 48

    def test_set_and_get(self, isolated_env):
        set_setting("tax_home_state", "florida")
        set_setting("federal_rate", "0.24")
        set_setting("weeks_worked", "50")

        saved = json.loads((isolated_env["config_dir"] / "settings.json").read_text())
        assert saved == {"tax_home_state": "FL", "federal_rate": "0.24", "weeks_worked": 50}
        assert get_setting("tax_home_state") == "FL"

    @pytest.mark.parametrize("key, value", [
        ("unknown_key", "1"),
        ("tax_home_state", "Narnia"),
        ("weeks_worked", "53"),
        ("weeks_worked", "many"),
        ("federal_rate", "1.5"),
        ("federal_rate", "abc"),
        ("gsa_daily_meals", "-5"),
        ("state_tax_rates_file", "/nonexistent/rates.yaml"),
    ])
    def test_invalid_values_rejected(self, isolated_env, key, value):
        with pytest.raises(ConfigError):
            set_setting(key, value)

    def test_unset(self, isolated_env):
        set_setting("tax_home_state", "CA")

        assert unset_setting("tax_home_state") is True
        assert unset_setting("tax_home_state") is False
        assert get_setting("tax_home_state") == DEFAULT_SETTINGS["tax_home_state"]

    def test_corrupt_settings_file(self, isolated_env):
        (isolated_env["config_dir"] / "settings.json").write_text("{not json")

        with pytest.raises(ConfigError):
            load_settings()


class TestDerivedConfig:

    def test_tax_context_from_settings(self, isolated_env):
        set_setting("tax_home_state", "OR")

        context = load_tax_context()

        assert context.tax_home_state is USState.OREGON
        assert context.federal_rate == Decimal("0.22")
        assert context.weeks_worked == 48

    def test_explicit_values_override_settings(self, isolated_env):
        context = load_tax_context("CA", "0.3", 40)

        assert context.tax_home_state is USState.CALIFORNIA
        assert context.federal_rate == Decimal("0.3")
        assert context.weeks_worked == 40

    def test_invalid_context(self, isolated_env):
        with pytest.raises(ConfigError):
            load_tax_context("CA", "0.22", 0)

    def test_state_table_override(self, isolated_env):
        rates_file = isolated_env["tmp_path"] / "rates.yaml"
        rates_file.write_text(yaml.dump({"rates": {"CA": 0.08}}))
        set_setting("state_tax_rates_file", str(rates_file))

        table = load_configured_state_tax_table()

        assert table.rate_for("CA") == Decimal("0.08")

    def test_gsa_standard_from_settings(self, isolated_env):
        set_setting("gsa_daily_lodging", "110")

        table = load_configured_gsa_rate_table()

        assert table.standard.lodging == Decimal("110")
        assert table.standard.meals == Decimal("79")

    def test_gsa_rates_file_standard_applies_by_default(self, isolated_env):
        rates_file = isolated_env["tmp_path"] / "gsa.yaml"
        rates_file.write_text(yaml.dump({"standard": {"lodging": 150, "meals": 68}, "localities": {}}))
        set_setting("gsa_rates_file", str(rates_file))

        table = load_configured_gsa_rate_table()

        assert table.standard.lodging == Decimal("150")
        assert table.standard.meals == Decimal("68")


class TestLoadOffers:
    """Tests for offers YAML loading with skip-and-report."""

    def test_load(self, isolated_env):
        path = write_offers(isolated_env["tmp_path"] / "offers.yaml", [
            {"id": "a", "name": "A", "hourly_rate": 50, "hours_per_week": 36,
             "housing_stipend": 1200, "meals_stipend": 300},
            {"id": 2, "hourly_rate": 45.5, "hours_per_week": 36, "state": "ca"},
        ])

        offers, rejected = load_offers(path)

        assert [o.id for o in offers] == ["a", "2"]
        assert offers[1].hourly_rate == Decimal("45.5")
        assert offers[1].state is USState.CALIFORNIA
        assert rejected == []

    def test_schema_failures_reported(self, isolated_env):
        path = write_offers(isolated_env["tmp_path"] / "offers.yaml", [
            {"id": "ok", "hourly_rate": 50, "hours_per_week": 36},
            {"id": "typo", "hourly_rate": 50, "hours_per_week": 36, "housing_stipnd": 100},
            {"id": "no-rate", "hours_per_week": 36},
            "just a string",
        ])

        offers, rejected = load_offers(path)

        assert [o.id for o in offers] == ["ok"]
        assert [r.offer_id for r in rejected] == ["typo", "no-rate", None]
        assert any("housing_stipnd" in e for e in rejected[0].errors)
        assert any("hourly_rate" in e for e in rejected[1].errors)

    def test_top_level_list_accepted(self, isolated_env):
        path = isolated_env["tmp_path"] / "offers.yaml"
        path.write_text(yaml.dump([{"id": "a", "hourly_rate": 50, "hours_per_week": 36}]))

        offers, _ = load_offers(path)

        assert len(offers) == 1

    def test_missing_file(self, isolated_env):
        with pytest.raises(FileNotFoundError):
            load_offers(isolated_env["tmp_path"] / "missing.yaml")

    @pytest.mark.parametrize("content", ["offers: 5\n", "just text\n", "offers: [unclosed\n"])
    def test_malformed_document(self, isolated_env, content):
        path = isolated_env["tmp_path"] / "offers.yaml"
        path.write_text(content)

        with pytest.raises(ConfigError):
            load_offers(path)

    def test_parse_offer_entry_integer_id(self):
        offer = parse_offer_entry({"id": 7, "hourly_rate": 40, "hours_per_week": 36})

        assert offer.id == "7"

    def test_parse_offer_entries(self):
        offers, rejected = parse_offer_entries([
            {"id": "x", "hourly_rate": "40", "hours_per_week": "36"},
            {"id": "y", "hourly_rate": "forty", "hours_per_week": 36},
        ])

        assert offers[0].hourly_rate == Decimal("40")
        assert rejected[0].offer_id == "y"
