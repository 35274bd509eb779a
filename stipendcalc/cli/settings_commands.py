"""Settings CLI commands for Stipend Calc.

Manages settings.json - tax home, rates, weeks worked, rate table paths.
"""

import click

from stipendcalc.sdk import (
    ConfigError,
    DEFAULT_SETTINGS,
    get_settings_path,
    load_settings,
    set_setting,
    unset_setting,
)


def _describe_default(key, default):
    if default is None and key.startswith("gsa_daily_"):
        return "from rate table"
    return default


@click.group()
def settings():
    """Manage settings (settings.json).

    \b
    Available settings:
    - tax_home_state: state of your IRS tax home (e.g. TX)
    - federal_rate: federal effective rate (e.g. 0.22)
    - weeks_worked: weeks worked per year (1-52)
    - gsa_daily_lodging / gsa_daily_meals: fallback GSA per-diem
    - state_tax_rates_file / gsa_rates_file: custom rate tables
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    try:
        current = load_settings()
    except ConfigError as e:
        raise click.ClickException(str(e))

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
        click.echo()

    click.echo("Effective settings:")
    for key, default in DEFAULT_SETTINGS.items():
        if key in current:
            click.echo(f"  {key}: {current[key]}")
        else:
            click.echo(f"  {key}: {_describe_default(key, default)} (default)")


@settings.command("set")
@click.argument("key")
@click.argument("value")
def settings_set(key, value):
    """Set KEY to VALUE.

    Examples:
        stipend-calc settings set tax_home_state FL
        stipend-calc settings set federal_rate 0.24
    """
    try:
        path = set_setting(key, value)
    except ConfigError as e:
        raise click.ClickException(str(e))

    click.echo(f"Set {key}: {load_settings()[key]}")
    click.echo(f"Saved to: {path}")


@settings.command("unset")
@click.argument("key")
def settings_unset(key):
    """Remove KEY so its default applies."""
    try:
        removed = unset_setting(key)
    except ConfigError as e:
        raise click.ClickException(str(e))

    if removed:
        click.echo(f"Cleared {key} (default: {_describe_default(key, DEFAULT_SETTINGS.get(key))})")
    else:
        click.echo(f"{key} was not set.")
