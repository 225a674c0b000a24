"""Output helpers for the wealth projection.

This module provides simple functions to render projection series, summaries
and transaction listings in a tabular text format. Output goes through
``click.echo`` so it can be captured by the CLI test runner.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List

import click

from .data_models import INCOME, DataPoint, Transaction


def print_summary(summary: Dict[str, object]) -> None:
    """Print a summary of projection metrics in a human‑readable format."""
    click.echo("Summary")
    click.echo("-" * 72)
    if summary.get("start_month"):
        click.echo(f"Period             : {summary['start_month']} .. {summary['end_month']}")
    click.echo(f"Months projected   : {summary['months']}")
    click.echo(f"Initial balance    : {summary['initial_balance']:.2f}")
    click.echo(f"Total income       : {summary['total_income']:.2f}")
    click.echo(f"Total expenses     : {summary['total_expense']:.2f}")
    click.echo(f"Investment return  : {summary['total_investment_return']:.2f}")
    click.echo(f"Final cash         : {summary['final_cash']:.0f}")
    click.echo(f"Final invested     : {summary['final_invested']:.0f}")
    click.echo(f"Final total        : {summary['final_total']:.0f}")
    click.echo(f"Net change         : {summary['net_change']:.2f}")
    click.echo(f"Lowest total       : {summary['lowest_total']:.0f}")
    # Months where the invested balance could not cover a deficit.
    if summary.get("negative_cash_months"):
        click.echo(f"Months cash < 0    : {summary['negative_cash_months']}")
    click.echo("-" * 72)


def print_series(series: Iterable[DataPoint]) -> None:
    """Print a projected series as a simple table."""
    headers = ["Period", "Cash", "Invested", "Total", "Income", "Expense", "NetFlow", "Return"]
    click.echo("\t".join(headers))
    for point in series:
        row = [
            point.date_label,
            f"{point.cash:.0f}",
            f"{point.invested:.0f}",
            f"{point.total:.0f}",
            f"{point.total_income:.2f}",
            f"{point.total_expense:.2f}",
            f"{point.net_cash_flow:.2f}",
            f"{point.investment_return:.0f}",
        ]
        click.echo("\t".join(row))


def print_transactions(transactions: Iterable[Transaction]) -> None:
    headers = ["Id", "Description", "Type", "Frequency", "Amount", "Start", "End", "Enabled"]
    click.echo("\t".join(headers))
    for t in transactions:
        row = [
            t.id,
            t.description,
            t.type,
            t.frequency,
            f"{t.amount:.2f}",
            t.start_date.isoformat(),
            t.end_date.isoformat() if t.end_date else "-",
            "Yes" if t.enabled else "No",
        ]
        click.echo("\t".join(row))


def print_calendar(title: str, month_data: Dict[str, object]) -> None:
    """Print a month's summary followed by the rules on each active day."""
    summary = month_data["summary"]
    days: Dict[date, List[Transaction]] = month_data["days"]
    click.echo(title)
    click.echo("=" * 72)
    click.echo(f"Income     : {summary['totalIncome']:.2f}")
    click.echo(f"Expenses   : {summary['totalExpense']:.2f}")
    click.echo(f"Net flow   : {summary['netFlow']:.2f}")
    click.echo(f"Returns    : {summary['investmentReturn']:.2f}")
    click.echo("=" * 72)
    if not days:
        click.echo("No transactions this month.")
        return
    for day, rules in days.items():
        for t in rules:
            sign = "+" if t.type == INCOME else "-"
            status = "" if t.enabled else " (disabled)"
            click.echo(f"{day.isoformat()}  {sign}{t.amount:.2f}  {t.description or t.id}{status}")


def print_comparison(s1: Dict[str, object], s2: Dict[str, object]) -> None:
    """Print a comparison of two projection summaries side by side.

    The difference column is scenario2 - scenario1, so a positive difference
    means the second projection ends up wealthier on that metric.
    """
    click.echo("Comparison")
    click.echo("=" * 72)
    keys = [
        "final_total",
        "final_invested",
        "final_cash",
        "total_income",
        "total_expense",
        "total_investment_return",
        "lowest_total",
    ]
    click.echo(f"{'Metric':24s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    for key in keys:
        v1 = s1.get(key)
        v2 = s2.get(key)
        diff = v2 - v1
        click.echo(f"{key:24s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    click.echo("=" * 72)
