"""Tests for the MCP tools (requires the 'mcp' extra).

Tool functions are called directly; every argument is passed explicitly
since their defaults are pydantic Field descriptors.
"""

import asyncio

import pytest

pytest.importorskip("mcp")

from stipendcalc.mcp import server


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("STIPEND_CALC_CONFIG_PATH", str(tmp_path))


OFFERS = [
    {"id": "a", "hourly_rate": 50, "hours_per_week": 36, "housing_stipend": 1500},
    {"id": "b", "hourly_rate": 45, "hours_per_week": 36, "housing_stipend": 1800},
    {"id": "bad", "hourly_rate": "n/a", "hours_per_week": 36},
]


def test_compare_offers():
    result = asyncio.run(server.compare_offers(
        offers=OFFERS, tax_home_state="TX", federal_rate="0.22", weeks_worked=48,
    ))

    assert [r["offer_id"] for r in result["results"]] == ["b", "a"]
    assert [r["offer_id"] for r in result["rejected"]] == ["bad"]
    assert result["context"]["state_rate"] == "0"


def test_compare_offers_unknown_state_returns_error():
    result = asyncio.run(server.compare_offers(
        offers=OFFERS, tax_home_state="Narnia", federal_rate=None, weeks_worked=None,
    ))

    assert "error" in result
    assert result["results"] == []


def test_check_gsa_compliance():
    offer = {"id": "x", "hourly_rate": 40, "hours_per_week": 36,
             "housing_stipend": 750, "meals_stipend": 553}

    result = asyncio.run(server.check_gsa_compliance(
        offer=offer, gsa_daily_lodging="107", gsa_daily_meals="79",
    ))

    assert result["is_compliant"] is False
    assert result["excess_amount"] == "1"


def test_check_gsa_compliance_integer_id():
    offer = {"id": 12, "hourly_rate": 40, "hours_per_week": 36, "housing_stipend": 700}

    result = asyncio.run(server.check_gsa_compliance(
        offer=offer, gsa_daily_lodging=None, gsa_daily_meals=None,
    ))

    assert result["offer_id"] == "12"
    assert result["is_compliant"] is True


def test_get_state_tax_rate():
    assert asyncio.run(server.get_state_tax_rate(state="CA")) == {"state": "CA", "rate": "0.093"}
    assert "error" in asyncio.run(server.get_state_tax_rate(state="ZZ"))


def test_parse_receipt():
    result = asyncio.run(server.parse_receipt(text="Corner Market\nTOTAL $5.25"))

    assert result["merchant_name"] == "Corner Market"
    assert result["amount"] == "5.25"
