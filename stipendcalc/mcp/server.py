"""Stipend Calc MCP Server - FastMCP implementation for offer comparison tools."""

import logging
from decimal import Decimal
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from stipendcalc.sdk import (
    OfferComparisonEngine,
    load_configured_gsa_rate_table,
    load_configured_state_tax_table,
    load_tax_context,
    parse_offer_entries,
    parse_offer_entry,
    parse_receipt_text,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("stipend-calc")


def _engine() -> OfferComparisonEngine:
    return OfferComparisonEngine(
        state_tax_table=load_configured_state_tax_table(),
        gsa_rates=load_configured_gsa_rate_table(),
    )


# --- Tools ---

@mcp.tool()
async def compare_offers(
    offers: list[dict[str, Any]] = Field(description="Offers with hourly_rate, hours_per_week, housing_stipend, meals_stipend, contract_weeks and optional bonuses"),
    tax_home_state: str | None = Field(default=None, description="Tax-home state code or name (default: settings)"),
    federal_rate: str | None = Field(default=None, description="Federal effective rate as a decimal, e.g. '0.22' (default: settings)"),
    weeks_worked: int | None = Field(default=None, description="Weeks worked per year, 1-52 (default: settings)"),
) -> dict[str, Any]:
    """Rank travel nursing offers by annual take-home pay. Invalid offers are skipped and listed under 'rejected'."""
    try:
        parsed, rejected = parse_offer_entries(offers, source="compare_offers")
        context = load_tax_context(tax_home_state, federal_rate, weeks_worked)
        engine = _engine()
        state_rate = engine.state_rate_for(context)
        report = engine.compare(parsed, context)

        result = report.to_dict()
        result["rejected"] = [r.to_dict() for r in rejected] + result["rejected"]
        result["context"] = {
            "tax_home_state": context.tax_home_state.value,
            "federal_rate": str(context.federal_rate),
            "state_rate": str(state_rate),
            "weeks_worked": context.weeks_worked,
        }
        return result

    except Exception as e:
        logger.error(f"Error comparing offers: {e}")
        return {"error": str(e), "results": [], "rejected": []}


@mcp.tool()
async def check_gsa_compliance(
    offer: dict[str, Any] = Field(description="A single offer (housing_stipend and meals_stipend are checked)"),
    gsa_daily_lodging: str | None = Field(default=None, description="GSA daily lodging rate (default: locality table)"),
    gsa_daily_meals: str | None = Field(default=None, description="GSA daily M&IE rate (default: locality table)"),
) -> dict[str, Any]:
    """Check whether an offer's weekly stipend stays within the GSA per-diem ceiling."""
    try:
        job_offer = parse_offer_entry(offer)
        engine = _engine()
        rates = engine.gsa_rates.rates_for(job_offer.location)
        result = engine.check_gsa_compliance(
            job_offer,
            Decimal(gsa_daily_lodging) if gsa_daily_lodging is not None else rates.lodging,
            Decimal(gsa_daily_meals) if gsa_daily_meals is not None else rates.meals,
        )
        return result.to_dict()

    except Exception as e:
        logger.error(f"Error checking GSA compliance: {e}")
        return {"error": str(e)}


@mcp.tool()
async def get_state_tax_rate(
    state: str = Field(description="Tax-home state code (CA) or name (California)"),
) -> dict[str, Any]:
    """Get the effective income tax rate for a tax-home state. No-income-tax states return 0."""
    try:
        rate = _engine().get_state_tax_rate(state)
        return {"state": state, "rate": str(rate)}

    except Exception as e:
        logger.error(f"Error looking up state rate: {e}")
        return {"error": str(e), "state": state}


@mcp.tool()
async def parse_receipt(
    text: str = Field(description="Receipt text from OCR or a PDF text layer"),
) -> dict[str, Any]:
    """Extract merchant, total amount, date and line items from receipt text."""
    try:
        return parse_receipt_text(text).to_dict()

    except Exception as e:
        logger.error(f"Error parsing receipt: {e}")
        return {"error": str(e)}


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
