"""Rich renderers for SDK results.

Each function takes a Console and an SDK result model and prints tables.
Amounts are formatted with format_vnd so the screen shows exactly what the
engine computed.
"""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from vnpit.sdk import format_rate, format_vnd
from vnpit.sdk.schemas import LawComparison, MonthResult, StrategyComparison, YearlyResult
from vnpit.sdk.taxes import RuleSet


def _law_label(law) -> str:
    return "[cyan]new[/cyan]" if law.value == "new" else "old"


def render_month(console: Console, result: MonthResult, title: Optional[str] = None) -> None:
    """Render a single-month result: summary plus bracket walk."""
    if result.approximate:
        console.print(Panel(
            f"[yellow]Solver stopped after {result.iterations} iteration(s); "
            f"net is {format_vnd(result.net)} for a target of {format_vnd(result.target_net)}[/yellow]",
            title="Approximate",
            border_style="yellow",
        ))

    table = Table(show_header=False, box=box.SIMPLE, padding=(0, 2))
    table.add_column("item", style="dim")
    table.add_column("amount", justify="right")

    table.add_row("Gross", format_vnd(result.gross))
    table.add_row("Social insurance (BHXH)", f"-{format_vnd(result.insurance.social)}")
    table.add_row("Health insurance (BHYT)", f"-{format_vnd(result.insurance.health)}")
    table.add_row("Unemployment insurance (BHTN)", f"-{format_vnd(result.insurance.unemployment)}")
    table.add_row(f"Family deduction ({result.dependents} dependent(s))", format_vnd(result.family_deduction))
    if result.other_deductions:
        table.add_row("Other deductions", format_vnd(result.other_deductions))
    table.add_row("Taxable income", format_vnd(result.taxable_income))
    table.add_row("PIT", f"-{format_vnd(result.tax)}")
    table.add_row("[bold]Net[/bold]", f"[bold green]{format_vnd(result.net)}[/bold green]")
    table.add_row("Law", _law_label(result.law_used))
    table.add_row("Marginal / effective rate",
                  f"{format_rate(result.marginal_rate)} / {format_rate(result.effective_rate)}")

    heading = title or f"{result.year}-{result.month:02d}"
    console.print(Panel(table, title=heading, border_style="dim"))

    if result.brackets:
        _render_bracket_walk(console, result)


def _render_bracket_walk(console: Console, result: MonthResult) -> None:
    table = Table(show_header=True, header_style="bold", box=box.SIMPLE)
    table.add_column("Bracket")
    table.add_column("Rate", justify="right")
    table.add_column("Taxed", justify="right")
    table.add_column("Tax", justify="right")

    for row in result.brackets:
        upper = format_vnd(row.upper, symbol=False) if row.upper is not None else "∞"
        table.add_row(
            f"{format_vnd(row.lower, symbol=False)} - {upper}",
            format_rate(row.rate),
            format_vnd(row.taxable_amount),
            format_vnd(row.tax),
        )
    console.print(table)


def render_law_comparison(console: Console, comparison: LawComparison) -> None:
    """Side-by-side old vs new law for one month."""
    old, new = comparison.old_law, comparison.new_law

    table = Table(show_header=True, header_style="bold", box=box.SIMPLE)
    table.add_column("", style="dim")
    table.add_column("Old law", justify="right")
    table.add_column("New law", justify="right")

    table.add_row("Gross", format_vnd(old.gross), format_vnd(new.gross))
    table.add_row("Insurance", format_vnd(old.insurance.total), format_vnd(new.insurance.total))
    table.add_row("Family deduction", format_vnd(old.family_deduction), format_vnd(new.family_deduction))
    table.add_row("Taxable income", format_vnd(old.taxable_income), format_vnd(new.taxable_income))
    table.add_row("PIT", format_vnd(old.tax), format_vnd(new.tax))
    table.add_row("Net", format_vnd(old.net), format_vnd(new.net))
    table.add_row("Effective rate", format_rate(old.effective_rate), format_rate(new.effective_rate))
    console.print(table)

    if comparison.savings > 0:
        console.print(f"New law saves [green]{format_vnd(comparison.savings)}[/green] per month")
    elif comparison.savings < 0:
        console.print(f"New law costs [red]{format_vnd(-comparison.savings)}[/red] more per month")
    else:
        console.print("No difference between the two schedules")


def render_year(console: Console, result: YearlyResult) -> None:
    """Per-entry table followed by yearly totals."""
    table = Table(show_header=True, header_style="bold", box=box.SIMPLE, title=str(result.year))
    table.add_column("Month")
    table.add_column("Entry")
    table.add_column("Law")
    table.add_column("Gross", justify="right")
    table.add_column("Insurance", justify="right")
    table.add_column("PIT", justify="right")
    table.add_column("Net", justify="right")

    for row in result.monthly_breakdown:
        entry = row.label or ("bonus" if row.is_bonus else "salary")
        if row.approximate:
            entry += " [yellow]~[/yellow]"
        table.add_row(
            f"{row.month:02d}",
            entry,
            _law_label(row.law_used),
            format_vnd(row.gross, symbol=False),
            format_vnd(row.insurance.total, symbol=False),
            format_vnd(row.tax, symbol=False),
            format_vnd(row.net, symbol=False),
        )

    table.add_section()
    table.add_row(
        "[bold]Total[/bold]", "", "",
        format_vnd(result.total_gross, symbol=False),
        format_vnd(result.total_insurance, symbol=False),
        format_vnd(result.total_tax, symbol=False),
        format_vnd(result.total_net, symbol=False),
    )
    console.print(table)

    console.print(
        f"Effective rate {format_rate(result.effective_rate)}; "
        f"{result.old_law_months} old-law / {result.new_law_months} new-law entries"
    )
    if result.total_gross:
        diff = result.tax_difference
        sign = "+" if diff > 0 else ""
        style = "red" if diff > 0 else "green"
        console.print(
            f"Same total as 12 equal months: PIT {format_vnd(result.uniform_total_tax)} "
            f"([{style}]{sign}{format_vnd(diff)}[/{style}] for this timing)"
        )
    if result.approximate:
        console.print("[yellow]~ solved approximately (iteration cap reached)[/yellow]")


def render_comparison(console: Console, comparison: StrategyComparison) -> None:
    """Rank strategies by combined two-year tax."""
    table = Table(show_header=True, header_style="bold", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Strategy")
    table.add_column("Gross", justify="right")
    table.add_column("PIT 1st year", justify="right")
    table.add_column("PIT 2nd year", justify="right")
    table.add_column("Combined PIT", justify="right")
    table.add_column("vs #1", justify="right")

    for index, (result, saving) in enumerate(zip(comparison.strategies, comparison.savings_vs_first)):
        row_style = "bold green" if index == comparison.best_strategy else None
        table.add_row(
            str(index + 1),
            result.name or f"Strategy {index + 1}",
            format_vnd(result.combined_gross, symbol=False),
            format_vnd(result.first_year.total_tax, symbol=False),
            format_vnd(result.second_year.total_tax, symbol=False),
            format_vnd(result.combined_tax, symbol=False),
            format_vnd(saving, symbol=False) if index else "",
            style=row_style,
        )
    console.print(table)

    best = comparison.best
    console.print(f"Best: [bold]{best.name}[/bold], saves {format_vnd(comparison.max_savings)} vs #1")


def render_rules(console: Console, rule_set: RuleSet) -> None:
    """Bracket schedule, deductions and insurance of a rule set."""
    console.print(f"[bold]{rule_set.law.value.title()} law[/bold] (effective {rule_set.effective.isoformat()})")

    table = Table(show_header=True, header_style="bold", box=box.SIMPLE)
    table.add_column("Taxable income from", justify="right")
    table.add_column("up to", justify="right")
    table.add_column("Rate", justify="right")
    for bracket in rule_set.schedule:
        upper = format_vnd(bracket.upper) if bracket.upper is not None else "∞"
        table.add_row(format_vnd(bracket.lower), upper, format_rate(bracket.rate))
    console.print(table)

    deductions = rule_set.deductions
    insurance = rule_set.insurance
    console.print(f"Personal deduction {format_vnd(deductions.personal)}; "
                  f"per dependent {format_vnd(deductions.dependent)}")
    console.print(f"Insurance {format_rate(insurance.social_rate)} + {format_rate(insurance.health_rate)} + "
                  f"{format_rate(insurance.unemployment_rate)}, capped at {format_vnd(insurance.salary_cap)}")
    caps = ", ".join(f"region {region}: {format_vnd(cap)}"
                     for region, cap in sorted(insurance.unemployment_caps.items()))
    if caps:
        console.print(f"Unemployment insurance caps: {caps}")
