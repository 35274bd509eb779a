"""Receipt CLI commands for Stipend Calc.

Pulls merchant, amount and date out of expense receipts so stipend
spending can be tracked against the weekly allowance.
"""

import json
from pathlib import Path

import click
from rich.console import Console

from stipendcalc.sdk import ReceiptTextError, parse_receipt_text, read_receipt_text

from .renderers.comparison_renderer import render_receipt


@click.group()
def receipt():
    """Parse expense receipts."""
    pass


@receipt.command("parse")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def receipt_parse(file, output_format):
    """Extract merchant, total, date and items from a receipt FILE.

    FILE is a PDF with a text layer, or a text file holding OCR output.
    Images must be run through OCR first.

    \b
    Examples:
      stipend-calc receipt parse grocery.pdf
      stipend-calc receipt parse scan.txt --format json
    """
    try:
        text = read_receipt_text(Path(file))
    except ReceiptTextError as e:
        raise click.ClickException(str(e))

    parsed = parse_receipt_text(text).to_dict()

    if output_format == "json":
        click.echo(json.dumps(parsed, indent=2))
    else:
        render_receipt(Console(), parsed)
