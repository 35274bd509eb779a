"""Stipend Calc CLI - Command-line interface for comparing travel nursing offers."""

import json
import logging
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click
from rich.console import Console

from stipendcalc import __version__
from stipendcalc.sdk import (
    ConfigError,
    InvalidInputError,
    OfferComparisonEngine,
    RejectedOffer,
    StipendCalcError,
    estimate_federal_tax_bracket,
    parse_state,
    load_configured_gsa_rate_table,
    load_configured_state_tax_table,
    load_offers,
    load_tax_context,
)

from .receipt_commands import receipt as receipt_group
from .settings_commands import settings as settings_group
from .renderers.comparison_renderer import (
    render_comparison,
    render_gsa_results,
    render_rejected,
    render_savings,
)

FORMAT_OPTION = click.option(
    "--format", "output_format", type=click.Choice(["text", "json"]), default="text",
    help="Output format (default: text)",
)


def _parse_decimal(ctx, param, value):
    """click callback: keep money and rates exact as Decimal."""
    if value is None:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"'{value}' is not a number")
    if not number.is_finite():
        raise click.BadParameter(f"'{value}' is not a finite number")
    return number


def _load_offers_or_fail(offers_file: str):
    try:
        return load_offers(Path(offers_file))
    except (FileNotFoundError, ConfigError) as e:
        raise click.ClickException(str(e))


def _build_engine() -> OfferComparisonEngine:
    try:
        return OfferComparisonEngine(
            state_tax_table=load_configured_state_tax_table(),
            gsa_rates=load_configured_gsa_rate_table(),
        )
    except (FileNotFoundError, StipendCalcError) as e:
        raise click.ClickException(str(e))


def _echo_json(data: dict) -> None:
    click.echo(json.dumps(data, indent=2))


@click.group()
@click.version_option(version=__version__, prog_name="stipend-calc")
def cli():
    """Stipend Calc - Compare travel nursing offers by take-home pay.

    Offers are read from a YAML file with an 'offers' list. Tax settings
    default to settings.json, overridable per command.

    Configuration is loaded from (in order):

    \b
    1. STIPEND_CALC_CONFIG_PATH environment variable
    2. ~/.config/stipend-calc/settings.json (XDG default)

    Run 'stipend-calc settings show' to see the effective settings.
    """
    pass


cli.add_command(settings_group)
cli.add_command(receipt_group)


@cli.command("compare")
@click.argument("offers_file", type=click.Path())
@click.option("--state", "tax_home_state", help="Tax-home state (code or name). Default: settings")
@click.option("--federal-rate", help="Federal effective rate, e.g. 0.22. Default: settings")
@click.option("--weeks", "weeks_worked", type=int, help="Weeks worked per year (1-52). Default: settings")
@FORMAT_OPTION
def compare(offers_file, tax_home_state, federal_rate, weeks_worked, output_format):
    """Rank offers by annual take-home pay.

    State tax is based on your tax home, never the assignment state.
    Offers with invalid values are skipped and listed after the ranking.

    \b
    Examples:
      stipend-calc compare offers.yaml
      stipend-calc compare offers.yaml --state CA --federal-rate 0.24
      stipend-calc compare offers.yaml --format json
    """
    offers, rejected = _load_offers_or_fail(offers_file)
    engine = _build_engine()

    try:
        context = load_tax_context(tax_home_state, federal_rate, weeks_worked)
        state_rate = engine.state_rate_for(context)
        report = engine.compare(offers, context)
    except StipendCalcError as e:
        raise click.ClickException(str(e))

    data = report.to_dict()
    data["rejected"] = [r.to_dict() for r in rejected] + data["rejected"]
    data["context"] = {
        "tax_home_state": context.tax_home_state.value,
        "federal_rate": str(context.federal_rate),
        "state_rate": str(state_rate),
        "weeks_worked": context.weeks_worked,
    }

    if output_format == "json":
        _echo_json(data)
    else:
        render_comparison(Console(), data)


@cli.command("gsa")
@click.argument("offers_file", type=click.Path())
@click.option("--lodging", callback=_parse_decimal, help="GSA daily lodging rate. Default: locality table")
@click.option("--meals", callback=_parse_decimal, help="GSA daily meals & incidentals rate. Default: locality table")
@FORMAT_OPTION
def gsa(offers_file, lodging, meals, output_format):
    """Check weekly stipends against the GSA per-diem ceiling.

    Without --lodging/--meals, each offer's location is looked up in the
    GSA rate table, falling back to the standard CONUS rate.

    \b
    Examples:
      stipend-calc gsa offers.yaml
      stipend-calc gsa offers.yaml --lodging 236 --meals 79
    """
    offers, rejected = _load_offers_or_fail(offers_file)
    engine = _build_engine()

    results = []
    for offer in offers:
        rates = engine.gsa_rates.rates_for(offer.location)
        try:
            result = engine.check_gsa_compliance(
                offer,
                lodging if lodging is not None else rates.lodging,
                meals if meals is not None else rates.meals,
            )
        except InvalidInputError as e:
            rejected.append(RejectedOffer(offer_id=offer.id, errors=tuple(e.errors)))
            continue
        results.append(result.to_dict())

    if output_format == "json":
        _echo_json({"results": results, "rejected": [r.to_dict() for r in rejected]})
        return

    console = Console()
    if results:
        render_gsa_results(console, results)
    else:
        console.print("No valid offers to check.", style="yellow")
    render_rejected(console, [r.to_dict() for r in rejected])


@cli.command("savings")
@click.argument("offers_file", type=click.Path())
@click.option("--state", "tax_home_state", help="Tax-home state (code or name). Default: settings")
@click.option("--federal-rate", help="Federal effective rate, e.g. 0.22. Default: settings")
@click.option("--weeks", "weeks_worked", type=int, help="Weeks worked per year (1-52). Default: settings")
@FORMAT_OPTION
def savings(offers_file, tax_home_state, federal_rate, weeks_worked, output_format):
    """Estimate annual tax avoided by receiving stipends instead of wages.

    Illustrative only: assumes total compensation held constant.
    """
    offers, rejected = _load_offers_or_fail(offers_file)
    engine = _build_engine()

    try:
        context = load_tax_context(tax_home_state, federal_rate, weeks_worked)
        engine.state_rate_for(context)
    except StipendCalcError as e:
        raise click.ClickException(str(e))

    entries = []
    for offer in offers:
        try:
            amount = engine.stipend_tax_savings(offer, context)
        except InvalidInputError as e:
            rejected.append(RejectedOffer(offer_id=offer.id, errors=tuple(e.errors)))
            continue
        entries.append({
            "offer_id": offer.id,
            "weekly_stipend": str(offer.weekly_stipend),
            "annual_savings": str(amount),
        })

    data = {"savings": entries, "rejected": [r.to_dict() for r in rejected]}
    if output_format == "json":
        _echo_json(data)
    else:
        render_savings(Console(), data)


@cli.command("state-rate")
@click.argument("state")
@FORMAT_OPTION
def state_rate(state, output_format):
    """Show the effective income tax rate for a tax-home STATE.

    STATE may be a postal code (CA) or a full name ("New York").
    """
    engine = _build_engine()
    try:
        resolved = parse_state(state)
        rate = engine.get_state_tax_rate(resolved)
    except StipendCalcError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        _echo_json({"state": resolved.value, "rate": str(rate)})
    else:
        click.echo(f"{resolved.full_name} ({resolved.value}): {rate * 100:.2f}%")


@cli.command("bracket")
@click.argument("income", callback=_parse_decimal)
@FORMAT_OPTION
def bracket(income, output_format):
    """Estimate the marginal federal bracket for an annual INCOME (single filer, 2024)."""
    rate = estimate_federal_tax_bracket(income)

    if output_format == "json":
        _echo_json({"income": str(income), "rate": str(rate)})
    else:
        click.echo(f"${income:,.2f}: {rate * 100:.0f}% bracket")


def main():
    """Entry point for the CLI."""
    log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
        datefmt="%H:%M:%S"
    )
    cli()


if __name__ == "__main__":
    main()
