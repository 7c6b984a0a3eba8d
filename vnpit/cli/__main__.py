"""vn-pit CLI - Vietnamese PIT and take-home pay calculations."""

import json
import logging
import os
from datetime import date

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from vnpit import __version__
from vnpit.sdk import (
    BONUS_SHAPES,
    PRESETS,
    ConfigError,
    InsuranceOptions,
    InvalidInputError,
    LawRegime,
    MonthInput,
    RulesNotFoundError,
    build_year_inputs,
    calculate_year,
    compare_laws,
    compare_presets,
    compare_strategies,
    custom_strategy,
    get_default_dependents,
    get_default_region,
    get_law_change_date,
    get_rule_set,
    gross_from_net,
    net_from_gross,
)
from .renderers.result_renderer import (
    render_comparison,
    render_law_comparison,
    render_month,
    render_rules,
    render_year,
)
from .settings_commands import settings as settings_group


# Errors the SDK raises for bad input, bad settings or missing rule files
SDK_ERRORS = (InvalidInputError, ConfigError, RulesNotFoundError, ValidationError)


@click.group()
@click.version_option(version=__version__, prog_name="vn-pit")
def cli():
    """vn-pit - Vietnamese personal income tax calculator.

    Converts GROSS to NET and back, prices a year of salary and bonuses
    across the 2026 law change, and compares bonus-timing strategies.

    Defaults for --dependents, --region and the law change date come from
    settings.json (see 'vn-pit settings show').
    """
    pass


cli.add_command(settings_group)


def _output_option(f):
    return click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
                        help="Output format (default: text)")(f)


def _household_options(f):
    f = click.option("--dependents", "-d", type=click.IntRange(min=0), default=None,
                     help="Registered dependents (default: settings or 0)")(f)
    f = click.option("--region", "-r", type=click.IntRange(1, 4), default=None,
                     help="Minimum-wage region 1-4 (default: settings or 1)")(f)
    f = click.option("--other-deductions", type=float, default=0,
                     help="Monthly pension/charity contributions that reduce taxable income")(f)
    f = click.option("--exclude-insurance", type=click.Choice(["social", "health", "unemployment"]),
                     multiple=True, help="Leave an insurance component out (repeatable)")(f)
    f = click.option("--law-change-date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
                     help="Date the new law applies from (default: settings or 2026-01-01)")(f)
    return f


def _period_options(f):
    today = date.today()
    f = click.option("--month", "-m", type=click.IntRange(1, 12), default=today.month,
                     show_default="current month", help="Calendar month")(f)
    f = click.option("--year", "-y", type=int, default=today.year,
                     show_default="current year", help="Calendar year")(f)
    return f


def _resolve_household(dependents, region, exclude_insurance, law_change_date) -> dict:
    """Fill unset options from settings."""
    try:
        return {
            "dependents": dependents if dependents is not None else get_default_dependents(),
            "region": region if region is not None else get_default_region(),
            "insurance_options": InsuranceOptions(**{name: False for name in exclude_insurance}),
            "law_change_date": law_change_date.date() if law_change_date else get_law_change_date(),
        }
    except ConfigError as e:
        raise click.ClickException(f"Invalid settings: {e}")


def _echo_json(model) -> None:
    click.echo(json.dumps(model.model_dump(mode="json"), indent=2, ensure_ascii=False))


def _load_data_file(path: str):
    """Load a YAML or JSON file."""
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Cannot parse {path}: {e}")


@cli.command("gross")
@click.argument("amount", type=float)
@_period_options
@_household_options
@_output_option
def gross_cmd(amount, month, year, dependents, region, other_deductions, exclude_insurance,
              law_change_date, output_format):
    """Take-home pay for a monthly GROSS amount (VND).

    \b
    Examples:
      vn-pit gross 30000000 --year 2025 --month 6
      vn-pit gross 30000000 -d 2 --format json
    """
    household = _resolve_household(dependents, region, exclude_insurance, law_change_date)
    try:
        result = net_from_gross(amount, month, year, other_deductions=other_deductions, **household)
    except SDK_ERRORS as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        _echo_json(result)
        return
    render_month(Console(), result, title=f"GROSS -> NET {year}-{month:02d}")


@cli.command("net")
@click.argument("amount", type=float)
@_period_options
@_household_options
@click.option("--max-iterations", type=click.IntRange(min=1), default=100, show_default=True,
              help="Solver iteration cap")
@_output_option
def net_cmd(amount, month, year, dependents, region, other_deductions, exclude_insurance,
            law_change_date, max_iterations, output_format):
    """Gross salary needed for a monthly NET take-home AMOUNT (VND).

    \b
    Examples:
      vn-pit net 25000000 --year 2026 --month 1
    """
    household = _resolve_household(dependents, region, exclude_insurance, law_change_date)
    try:
        result = gross_from_net(amount, month, year, other_deductions=other_deductions,
                                max_iterations=max_iterations, **household)
    except SDK_ERRORS as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        _echo_json(result)
        return
    render_month(Console(), result, title=f"NET -> GROSS {year}-{month:02d}")


@cli.command("compare-laws")
@click.argument("amount", type=float)
@_period_options
@_household_options
@_output_option
def compare_laws_cmd(amount, month, year, dependents, region, other_deductions, exclude_insurance,
                     law_change_date, output_format):
    """Price a monthly GROSS AMOUNT under both the old and the new law."""
    household = _resolve_household(dependents, region, exclude_insurance, law_change_date)
    household.pop("law_change_date")
    try:
        comparison = compare_laws(amount, month, year, other_deductions=other_deductions, **household)
    except SDK_ERRORS as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        _echo_json(comparison)
        return
    render_law_comparison(Console(), comparison)


@cli.command("year")
@click.argument("salary", type=float, required=False)
@click.option("--year", "-y", "calendar_year", type=int, default=None, help="Calendar year (required with SALARY)")
@click.option("--bonus-shape", type=click.Choice(sorted(BONUS_SHAPES)), default=None,
              help="Add bonus entries of a common shape")
@click.option("--input", "input_file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="YAML/JSON list of month entries instead of SALARY")
@_household_options
@_output_option
def year_cmd(salary, calendar_year, bonus_shape, input_file, dependents, region, other_deductions,
             exclude_insurance, law_change_date, output_format):
    """Price a calendar year of salary and bonus entries.

    Either give a monthly SALARY with --year (optionally --bonus-shape), or
    an --input file whose entries look like:

    \b
      - {month: 1, year: 2026, gross_income: 30000000}
      - {month: 12, year: 2026, gross_income: 60000000, is_bonus: true}
      - {month: 6, year: 2026, net_income: 25000000}
    """
    if input_file:
        entries = _load_data_file(input_file)
        if not isinstance(entries, list):
            raise click.ClickException(f"{input_file} must contain a list of month entries")
    elif salary is not None:
        if calendar_year is None:
            raise click.UsageError("--year is required with SALARY")
        entries = None
    else:
        raise click.UsageError("Give a SALARY or an --input file")

    household = _resolve_household(dependents, region, exclude_insurance, law_change_date)
    try:
        if entries is None:
            entries = build_year_inputs(calendar_year, salary, bonus_shape)
        result = calculate_year(entries, year=calendar_year, other_deductions=other_deductions, **household)
    except SDK_ERRORS as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        _echo_json(result)
        return
    render_year(Console(), result)


@cli.command("compare")
@click.argument("salary", type=float, required=False)
@click.argument("bonus", type=float, required=False)
@click.option("--preset", "presets", type=click.Choice(list(PRESETS)), multiple=True,
              help="Presets to compare (repeatable, default: all)")
@click.option("--first-year", type=int, default=2025, show_default=True, help="Earlier year of the window")
@click.option("--bonus-month", type=click.IntRange(1, 12), default=12, show_default=True,
              help="Natural bonus month in the first year")
@click.option("--strategies", "strategies_file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="YAML/JSON list of custom strategies instead of presets")
@_household_options
@_output_option
def compare_cmd(salary, bonus, presets, first_year, bonus_month, strategies_file, dependents, region,
                other_deductions, exclude_insurance, law_change_date, output_format):
    """Compare bonus-timing strategies over two years.

    With SALARY and BONUS, runs the presets (normal, defer-bonus, optimize).
    With --strategies, runs custom strategies shaped like:

    \b
      - name: Bonus in December
        first_year: [{month: 12, year: 2025, gross_income: 60000000, is_bonus: true}]
        second_year: [{month: 1, year: 2026, gross_income: 30000000}]
    """
    household = _resolve_household(dependents, region, exclude_insurance, law_change_date)
    dependents = household.pop("dependents")
    household["other_deductions"] = other_deductions

    try:
        if strategies_file:
            raw = _load_data_file(strategies_file)
            if not isinstance(raw, list) or not raw or not all(isinstance(item, dict) for item in raw):
                raise click.ClickException(f"{strategies_file} must contain a non-empty list of strategies")
            strategies = [
                custom_strategy(
                    item.get("name", f"Strategy {index + 1}"),
                    [MonthInput.model_validate(entry) for entry in item.get("first_year", [])],
                    [MonthInput.model_validate(entry) for entry in item.get("second_year", [])],
                )
                for index, item in enumerate(raw)
            ]
            comparison = compare_strategies(strategies, dependents, **household)
        elif salary is not None and bonus is not None:
            comparison = compare_presets(
                salary, bonus, dependents,
                presets=presets or tuple(PRESETS),
                first_year=first_year,
                bonus_month=bonus_month,
                **household,
            )
        else:
            raise click.UsageError("Give SALARY and BONUS, or a --strategies file")
    except SDK_ERRORS as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        _echo_json(comparison)
        return
    render_comparison(Console(), comparison)


@cli.command("brackets")
@click.option("--law", type=click.Choice([law.value for law in LawRegime]), default=None,
              help="Show a specific law (default: both)")
@click.option("--on", "on_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Rule set in force on this date (default: latest)")
@_output_option
def brackets_cmd(law, on_date, output_format):
    """Show bracket schedules, family deductions and insurance rates."""
    on = on_date.date() if on_date else date.max
    laws = [LawRegime(law)] if law else list(LawRegime)
    try:
        rule_sets = [get_rule_set(on, regime) for regime in laws]
    except SDK_ERRORS as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        click.echo(json.dumps([r.model_dump(mode="json") for r in rule_sets], indent=2))
        return
    console = Console()
    for rule_set in rule_sets:
        render_rules(console, rule_set)
        console.print()


def main():
    """Entry point for the CLI."""
    # Configure logging based on LOG_LEVEL environment variable
    log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    cli()


if __name__ == "__main__":
    main()
