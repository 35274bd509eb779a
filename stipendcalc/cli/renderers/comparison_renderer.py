"""Rich renderers for offer comparisons, GSA checks and receipts.

Transforms SDK to_dict() output into formatted Rich tables. Money values
arrive as Decimal strings and are rounded to cents only here.
"""

from decimal import Decimal
from typing import List

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box


def _money(value) -> str:
    if value is None:
        return "-"
    return f"${Decimal(value):,.2f}"


def _pct(value) -> str:
    return f"{Decimal(value):.1f}%"


def render_rejected(console: Console, rejected: List[dict]) -> None:
    """Render offers that were skipped, one warning panel each."""
    for entry in rejected:
        label = entry.get("offer_id") or "<unidentified>"
        errors = "\n".join(f"- {e}" for e in entry.get("errors", []))
        console.print(Panel(
            f"[yellow]{errors}[/yellow]",
            title=f"Skipped offer '{label}'",
            border_style="yellow"
        ))


def render_comparison(console: Console, data: dict) -> None:
    """Render a ranked comparison.

    Args:
        console: Rich Console instance
        data: ComparisonReport.to_dict() plus a 'context' entry
    """
    context = data.get("context", {})
    if context:
        console.print(
            f"\n[bold]Tax home {context.get('tax_home_state')}[/bold] "
            f"[dim](federal {_pct(Decimal(context['federal_rate']) * 100)}, "
            f"state {_pct(Decimal(context['state_rate']) * 100)}, "
            f"{context.get('weeks_worked')} weeks/yr)[/dim]"
        )

    results = data.get("results", [])
    if not results:
        console.print("No valid offers to compare.", style="yellow")
    else:
        table = Table(show_header=True, header_style="bold", box=box.SIMPLE_HEAD)
        table.add_column("#", justify="right")
        table.add_column("Offer", style="cyan")
        table.add_column("Weeks", justify="right")
        table.add_column("Taxable/wk", justify="right")
        table.add_column("Stipends/wk", justify="right")
        table.add_column("Take-home/wk", justify="right")
        table.add_column("Annual take-home", justify="right")
        table.add_column("Blended rate", justify="right")
        table.add_column("Non-taxable", justify="right")

        for result in results:
            weekly = result["weekly"]
            is_best = result["rank"] == 1
            annual = _money(result["annual"]["take_home"])
            table.add_row(
                str(result["rank"]),
                f"{result['name']} [dim]({result['offer_id']})[/dim]",
                str(result["contract_weeks"]),
                _money(weekly["taxable"]),
                _money(weekly["stipends"]),
                _money(weekly["take_home"]),
                f"[green]{annual}[/green]" if is_best else annual,
                _money(result["blended_rate"]),
                _pct(result["non_taxable_percentage"]),
            )

        console.print(table)

    render_rejected(console, data.get("rejected", []))


def render_gsa_results(console: Console, results: List[dict]) -> None:
    """Render GSA compliance checks, one row per offer."""
    table = Table(show_header=True, header_style="bold", box=box.SIMPLE_HEAD)
    table.add_column("Offer", style="cyan")
    table.add_column("Stipend/wk", justify="right")
    table.add_column("GSA ceiling/wk", justify="right")
    table.add_column("Excess", justify="right")
    table.add_column("Status")

    for result in results:
        if result["is_compliant"]:
            status = "[green]compliant[/green]"
        else:
            parts = []
            if not result["housing_within_limit"]:
                parts.append("housing")
            if not result["meals_within_limit"]:
                parts.append("meals")
            detail = f" ({', '.join(parts)} over)" if parts else ""
            status = f"[red]over ceiling{detail}[/red]"
        table.add_row(
            result["offer_id"],
            _money(result["weekly_stipend"]),
            _money(result["weekly_ceiling"]),
            _money(result["excess_amount"]),
            status,
        )

    console.print(table)

    if any(not r["is_compliant"] for r in results):
        console.print(
            "[dim]Stipend above the GSA ceiling may be treated as taxable wages.[/dim]"
        )


def render_savings(console: Console, data: dict) -> None:
    """Render estimated annual tax avoided through stipends."""
    table = Table(show_header=True, header_style="bold", box=box.SIMPLE_HEAD)
    table.add_column("Offer", style="cyan")
    table.add_column("Stipend/wk", justify="right")
    table.add_column("Est. tax savings/yr", justify="right")

    for entry in data.get("savings", []):
        table.add_row(
            entry["offer_id"],
            _money(entry["weekly_stipend"]),
            f"[green]{_money(entry['annual_savings'])}[/green]",
        )

    console.print(table)
    render_rejected(console, data.get("rejected", []))


def render_receipt(console: Console, data: dict) -> None:
    """Render a parsed receipt as a key/value panel."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value")

    table.add_row("Merchant", data.get("merchant_name") or "[yellow]not found[/yellow]")
    table.add_row("Amount", _money(data.get("amount")))
    table.add_row("Date", data.get("date") or "[yellow]not found[/yellow]")
    table.add_row("Confidence", f"{data.get('confidence', 0):.0%}")

    console.print(Panel(table, title="Receipt", border_style="dim"))

    items = data.get("items", [])
    if items:
        console.print("[bold]Items[/bold]")
        for item in items:
            console.print(f"  {item}")
