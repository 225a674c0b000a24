"""Command‑line interface for the wealth projection.

This module uses the ``click`` library to implement a multi‑command interface.
Users can project a saved projection document month by month or year by year,
view summaries, compare two projections, list transactions or look at a single
calendar month. Results can be printed to the terminal or exported to JSON/CSV
files.
"""

from __future__ import annotations

import csv
import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from .calendar_month import month_calendar
from .data_models import DISPLAY_MODES, TIME_PERIODS, DataPoint, Projection, ProjectionSettings
from .engine import compute_projection, summarize_projection
from .formatter import print_calendar, print_comparison, print_series, print_summary, print_transactions
from .listing import FILTER_OPTIONS, SORT_OPTIONS, filter_transactions, sort_transactions
from .schema import ProjectionInputError, load_projection, series_to_list, settings_from_dict, validate_horizon
from .utils import decimal_from_str, parse_year_month


def parse_amount(value: str) -> str:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("250000") and shorthand with ``k``/``m`` suffixes
    (e.g., "250k" meaning 250_000). Returns a normalized numeric string.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1
    if value.endswith("k"):
        factor = 1_000
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000
        value = value[:-1]
    try:
        return str(decimal_from_str(value) * factor)
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_percent(value: str) -> str:
    """Parse a percentage string such as "0.5" or "75%".

    The value is kept in percent units: "75" stays 75, it is not turned into
    a fraction.
    """
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    try:
        return str(decimal_from_str(value))
    except ValueError:
        raise click.BadParameter(f"Invalid percentage: {value}")


def parse_start(start: Optional[str]) -> Optional[date]:
    if not start:
        return None
    try:
        return parse_year_month(start)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def open_projection(path: str) -> Projection:
    try:
        return load_projection(path)
    except ProjectionInputError as exc:
        raise click.BadParameter(str(exc))


def run_projection(
    projection: Projection,
    settings: ProjectionSettings,
    start: Optional[date],
    period: str = "monthly",
    mode: str = "relative",
) -> Tuple[List[DataPoint], List[DataPoint]]:
    """Check the horizon fits the calendar, then run the engine."""
    first_month = start or date.today()
    try:
        validate_horizon(settings, first_month)
    except ProjectionInputError as exc:
        raise click.BadParameter(str(exc))
    return compute_projection(projection.transactions, settings, period=period, mode=mode, start=first_month)


def build_settings_from_options(
    settings: ProjectionSettings,
    balance: Optional[str] = None,
    years: Optional[int] = None,
    rate: Optional[str] = None,
    allocation: Optional[str] = None,
) -> ProjectionSettings:
    """Apply command-line overrides on top of the document's settings.

    Overrides go through the same validation as the document itself.
    """
    data: Dict[str, Any] = {
        "initialBalance": settings.initial_balance,
        "projectionYears": settings.projection_years,
        "monthlyReturnRate": settings.monthly_return_rate,
        "investmentAllocation": settings.investment_allocation,
    }
    if balance is not None:
        data["initialBalance"] = parse_amount(balance)
    if years is not None:
        data["projectionYears"] = years
    if rate is not None:
        data["monthlyReturnRate"] = parse_percent(rate)
    if allocation is not None:
        data["investmentAllocation"] = parse_percent(allocation)
    try:
        return settings_from_dict(data)
    except ProjectionInputError as exc:
        raise click.BadParameter(str(exc))


def export_to_json(path: Path, series: List[DataPoint], summary: Dict[str, Any]) -> None:
    """Export series and summary to a JSON file."""
    data = {"summary": summary, "series": series_to_list(series)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, series: List[DataPoint]) -> None:
    """Export a series to a CSV file, one column per transaction id."""
    ids: Dict[str, None] = {}
    for point in series:
        for key in point.amounts:
            ids.setdefault(key, None)
    header = [
        "Date",
        "Label",
        "Cash",
        "Invested",
        "Total",
        "Total_Income",
        "Total_Expense",
        "Net_Cash_Flow",
        "Investment_Return",
    ] + list(ids)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for p in series:
            writer.writerow(
                [
                    p.date.strftime("%Y-%m"),
                    p.date_label,
                    float(p.cash),
                    float(p.invested),
                    float(p.total),
                    float(p.total_income),
                    float(p.total_expense),
                    float(p.net_cash_flow),
                    float(p.investment_return),
                ]
                + [float(p.amounts[key]) if key in p.amounts else 0.0 for key in ids]
            )


def settings_options(func):
    """Attach the options that override a projection's settings."""
    options = [
        click.option("--balance", "balance", help="Initial balance (e.g. 25000 or 25k)"),
        click.option("--years", "years", type=click.IntRange(min=0), help="Projection horizon in years"),
        click.option("--rate", "rate", help="Monthly return rate in percent (e.g. 0.5)"),
        click.option("--allocation", "allocation", help="Percent of balance and surplus invested (0-100)"),
        click.option("--start", "start", help="First projected month (YYYY-MM); defaults to the current month"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def cli() -> None:
    """Project wealth forward from recurring income and expenses."""
    pass


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--period", "period", type=click.Choice(TIME_PERIODS), default="monthly", help="Time period of the series")
@click.option("--mode", "mode", type=click.Choice(DISPLAY_MODES), default="relative", help="Per-period or cumulative flows")
@settings_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def project(
    file: str,
    period: str,
    mode: str,
    balance: Optional[str],
    years: Optional[int],
    rate: Optional[str],
    allocation: Optional[str],
    start: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print the projected series."""
    projection = open_projection(file)
    settings = build_settings_from_options(projection.settings, balance, years, rate, allocation)
    series, monthly = run_projection(projection, settings, parse_start(start), period=period, mode=mode)
    summary = summarize_projection(monthly, settings)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, series, summary)
            click.echo(f"Projection exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, series)
            click.echo(f"Projection exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
    else:
        print_summary(summary)
        # Limit rows printed to avoid flooding the terminal
        max_rows = 120
        if len(series) > max_rows:
            click.echo(f"Series has {len(series)} rows; showing first {max_rows} rows.")
            print_series(series[:max_rows])
        else:
            print_series(series)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@settings_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    file: str,
    balance: Optional[str],
    years: Optional[int],
    rate: Optional[str],
    allocation: Optional[str],
    start: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a projection."""
    projection = open_projection(file)
    settings = build_settings_from_options(projection.settings, balance, years, rate, allocation)
    _, monthly = run_projection(projection, settings, parse_start(start))
    summary_data = summarize_projection(monthly, settings)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command()
@click.argument("scenario1", type=click.Path(exists=True, dir_okay=False))
@click.argument("scenario2", type=click.Path(exists=True, dir_okay=False))
@click.option("--start", "start", help="First projected month (YYYY-MM)")
def compare(scenario1: str, scenario2: str, start: Optional[str]) -> None:
    """Compare two projection documents.

    Both projections start in the same month so their numbers line up:

        wealth-projection compare plan_a.json plan_b.json --start 2026-01
    """
    first_month = parse_start(start) or date.today()
    summaries = []
    for path in (scenario1, scenario2):
        projection = open_projection(path)
        _, monthly = run_projection(projection, projection.settings, first_month)
        summaries.append(summarize_projection(monthly, projection.settings))
    print_comparison(summaries[0], summaries[1])


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--search", "search", default="", help="Only descriptions containing this text")
@click.option("--filter", "filter_by", type=click.Choice(FILTER_OPTIONS), default="all", help="Type or status filter")
@click.option("--sort", "sort_by", type=click.Choice(SORT_OPTIONS), default="date", help="Sort key")
@click.option("--ascending", "ascending", is_flag=True, help="Sort ascending instead of descending")
def transactions(file: str, search: str, filter_by: str, sort_by: str, ascending: bool) -> None:
    """List the transactions of a projection."""
    projection = open_projection(file)
    rules = filter_transactions(projection.transactions, query=search, filter_by=filter_by)
    rules = sort_transactions(rules, sort_by=sort_by, descending=not ascending)
    if not rules:
        click.echo("No transactions match.")
        return
    print_transactions(rules)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--month", "month", required=True, help="Calendar month to show (YYYY-MM)")
@click.option("--start", "start", help="First projected month (YYYY-MM)")
def calendar(file: str, month: str, start: Optional[str]) -> None:
    """Show one calendar month: totals and the transactions on each day."""
    projection = open_projection(file)
    try:
        target = parse_year_month(month)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    _, monthly = run_projection(projection, projection.settings, parse_start(start))
    month_data = month_calendar(projection.transactions, monthly, target.year, target.month)
    print_calendar(target.strftime("%B %Y"), month_data)


if __name__ == "__main__":
    cli()
