"""Settings CLI commands for vn-pit.

Manages settings.json - law change date, region, default dependents and a
custom tax rules directory.
"""

import click

from vnpit.sdk import (
    ConfigError,
    load_settings,
    get_settings_path,
    set_setting,
    unset_setting,
    get_law_change_date,
    get_default_region,
    get_default_dependents,
    get_tax_rules_dir,
)
from vnpit.sdk.config import KNOWN_SETTINGS


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - law_change_date: date the new PIT schedule applies from (YYYY-MM-DD)
    - region: minimum-wage region 1-4
    - dependents: default number of dependents
    - tax_rules_dir: directory with custom tax-rules/*.yaml files
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their effective values."""
    settings_path = get_settings_path()
    try:
        current = load_settings()
    except ConfigError as e:
        raise click.ClickException(str(e))

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if current:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")
    else:
        click.echo("No settings configured (using defaults).")

    try:
        rules_dir = get_tax_rules_dir()
        click.echo()
        click.echo("Effective values:")
        click.echo(f"  law_change_date: {get_law_change_date().isoformat()}")
        click.echo(f"  region: {get_default_region()}")
        click.echo(f"  dependents: {get_default_dependents()}")
        click.echo(f"  tax_rules_dir: {rules_dir if rules_dir else '(bundled)'}")
    except ConfigError as e:
        raise click.ClickException(str(e))


@settings.command("set")
@click.argument("key", type=click.Choice(KNOWN_SETTINGS))
@click.argument("value")
def settings_set(key, value):
    """Set KEY to VALUE.

    Examples:
        vn-pit settings set law_change_date 2026-07-01
        vn-pit settings set region 2
    """
    try:
        path = set_setting(key, value)
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="VALUE")

    click.echo(f"Set {key}: {value}")
    click.echo(f"Saved to: {path}")


@settings.command("unset")
@click.argument("key", type=click.Choice(KNOWN_SETTINGS))
def settings_unset(key):
    """Remove KEY so the built-in default applies again."""
    try:
        if key not in load_settings():
            click.echo(f"{key} was not set.")
            return
        unset_setting(key)
    except ConfigError as e:
        raise click.ClickException(str(e))
    click.echo(f"Cleared {key} setting.")
