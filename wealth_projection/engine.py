"""Core calculation engine for the wealth projection.

This module implements the financial logic that turns a list of recurring
transaction rules and a handful of settings into a month-by-month projection
of cash and invested wealth. The monthly series can then be aggregated into
calendar years and converted into running (cumulative) totals for display.

Every stage returns a new list of ``DataPoint`` objects; nothing is mutated in
place and no state survives between calls.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .data_models import (
    DISPLAY_MODES,
    INCOME,
    INVESTMENT_RETURN_KEY,
    MONTHLY,
    RELATIVE,
    TIME_PERIODS,
    DataPoint,
    ProjectionSettings,
    Transaction,
)
from .recurrence import active_in_month
from .utils import add_months, first_of_month, month_label, round_half_up

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def simulate(
    transactions: Iterable[Transaction],
    settings: ProjectionSettings,
    start: Optional[date] = None,
) -> List[DataPoint]:
    """Run the month-by-month cash and investment simulation.

    Parameters
    ----------
    transactions: Iterable[Transaction]
        The rules to apply. Disabled rules are ignored.
    settings: ProjectionSettings
        Initial balance, horizon, monthly return rate and allocation.
    start: Optional[date]
        Any date in the first simulated month. Defaults to today.

    Returns
    -------
    List[DataPoint]
        ``settings.projection_years * 12`` points, one per month.

    Running balances are carried at full precision; only the reported
    ``cash``, ``invested``, ``total`` and ``investment_return`` are rounded.
    """
    rules = [t for t in transactions if t.enabled]
    allocation = settings.investment_allocation / HUNDRED
    rate = settings.monthly_return_rate / HUNDRED

    invested = settings.initial_balance * allocation
    cash = settings.initial_balance - invested

    first_month = first_of_month(start or date.today())
    points: List[DataPoint] = []
    for i in range(settings.projection_years * 12):
        current_date = add_months(first_month, i)

        income_breakdown: Dict[str, Decimal] = {}
        expense_breakdown: Dict[str, Decimal] = {}
        amounts: Dict[str, Decimal] = {}
        transaction_income = ZERO
        transaction_expense = ZERO
        for rule in active_in_month(rules, current_date):
            if rule.type == INCOME:
                transaction_income += rule.amount
                income_breakdown[rule.id] = rule.amount
                amounts[rule.id] = rule.amount
            else:
                transaction_expense += rule.amount
                expense_breakdown[rule.id] = rule.amount
                amounts[rule.id] = -rule.amount

        # The first month is "now" and never earns a return
        investment_return = invested * rate if i > 0 else ZERO
        invested += investment_return

        net_cash_flow = transaction_income - transaction_expense
        cash += net_cash_flow

        # Cover a cash deficit from the invested balance, as far as it goes
        if cash < 0 and invested > 0:
            withdrawal = min(-cash, invested)
            invested -= withdrawal
            cash += withdrawal

        # Sweep part of this month's surplus flow (not the cash balance)
        if net_cash_flow > 0:
            amount_to_invest = net_cash_flow * allocation
            if amount_to_invest > 0:
                cash -= amount_to_invest
                invested += amount_to_invest

        total_income = transaction_income
        if investment_return > 0:
            total_income += investment_return
            income_breakdown[INVESTMENT_RETURN_KEY] = investment_return
            amounts[INVESTMENT_RETURN_KEY] = investment_return

        points.append(
            DataPoint(
                date=current_date,
                date_label=month_label(current_date),
                cash=round_half_up(cash),
                invested=round_half_up(invested),
                total=round_half_up(cash + invested),
                total_income=total_income,
                total_expense=ZERO - transaction_expense,
                net_cash_flow=total_income - transaction_expense,
                investment_return=round_half_up(investment_return),
                income_breakdown=income_breakdown,
                expense_breakdown=expense_breakdown,
                amounts=amounts,
            )
        )
    return points


def _sum_maps(maps: Iterable[Dict[str, Decimal]]) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = {}
    for mapping in maps:
        for key, value in mapping.items():
            totals[key] = totals.get(key, ZERO) + value
    return totals


def _collapse_year(year: int, points: Sequence[DataPoint]) -> DataPoint:
    last = points[-1]
    return DataPoint(
        date=points[0].date,
        date_label=str(year),
        cash=last.cash,
        invested=last.invested,
        total=last.total,
        total_income=sum((p.total_income for p in points), ZERO),
        total_expense=sum((p.total_expense for p in points), ZERO),
        net_cash_flow=sum((p.net_cash_flow for p in points), ZERO),
        investment_return=sum((p.investment_return for p in points), ZERO),
        income_breakdown=_sum_maps(p.income_breakdown for p in points),
        expense_breakdown=_sum_maps(p.expense_breakdown for p in points),
        amounts=_sum_maps(p.amounts for p in points),
    )


def aggregate(series: Sequence[DataPoint], period: str) -> List[DataPoint]:
    """Collapse a monthly series into the requested time period.

    ``"monthly"`` returns the series as is. ``"yearly"`` groups points by
    calendar year: wealth fields take the year's last month, flows and
    breakdowns are summed over the year's months.
    """
    if period not in TIME_PERIODS:
        raise ValueError(f"Unknown time period: {period}")
    if period == MONTHLY:
        return list(series)

    years: Dict[int, List[DataPoint]] = {}
    for point in series:
        years.setdefault(point.date.year, []).append(point)
    return [_collapse_year(year, points) for year, points in years.items()]


def transform(series: Sequence[DataPoint], mode: str) -> List[DataPoint]:
    """Convert a series to relative (per-period) or absolute (cumulative) form.

    In absolute mode flows become running totals. Each transaction id has a
    single signed running total: income adds to it, expenses subtract from
    it. ``expense_breakdown`` reports its absolute value and ``amounts`` the
    signed value. Wealth fields are left untouched in both modes.
    """
    if mode not in DISPLAY_MODES:
        raise ValueError(f"Unknown display mode: {mode}")
    if mode == RELATIVE:
        return list(series)

    total_income = ZERO
    total_expense = ZERO
    net_cash_flow = ZERO
    investment_return = ZERO
    running: Dict[str, Decimal] = {}

    result: List[DataPoint] = []
    for point in series:
        total_income += point.total_income
        total_expense += point.total_expense
        net_cash_flow += point.net_cash_flow
        investment_return += point.investment_return

        income_breakdown: Dict[str, Decimal] = {}
        expense_breakdown: Dict[str, Decimal] = {}
        amounts: Dict[str, Decimal] = {}
        for key, value in point.income_breakdown.items():
            running[key] = running.get(key, ZERO) + value
            income_breakdown[key] = running[key]
            amounts[key] = running[key]
        for key, value in point.expense_breakdown.items():
            running[key] = running.get(key, ZERO) - value
            expense_breakdown[key] = abs(running[key])
            amounts[key] = running[key]

        result.append(
            replace(
                point,
                total_income=total_income,
                total_expense=total_expense,
                net_cash_flow=net_cash_flow,
                investment_return=investment_return,
                income_breakdown=income_breakdown,
                expense_breakdown=expense_breakdown,
                amounts=amounts,
            )
        )
    return result


def compute_projection(
    transactions: Iterable[Transaction],
    settings: ProjectionSettings,
    period: str = MONTHLY,
    mode: str = RELATIVE,
    start: Optional[date] = None,
) -> Tuple[List[DataPoint], List[DataPoint]]:
    """Run the full pipeline: simulate, aggregate, transform.

    Returns
    -------
    series: List[DataPoint]
        The series for display, in the requested period and mode.
    monthly: List[DataPoint]
        The raw monthly simulation, independent of period and mode.
    """
    monthly = simulate(transactions, settings, start=start)
    series = transform(aggregate(monthly, period), mode)
    return series, monthly


def summarize_projection(monthly: Sequence[DataPoint], settings: ProjectionSettings) -> Dict[str, object]:
    """Aggregate metrics over a raw monthly series.

    Transaction income excludes investment returns, which are reported on
    their own line.
    """
    total_return = sum((p.income_breakdown.get(INVESTMENT_RETURN_KEY, ZERO) for p in monthly), ZERO)
    total_income = sum((p.total_income for p in monthly), ZERO) - total_return
    total_expense = ZERO - sum((p.total_expense for p in monthly), ZERO)

    initial_invested = settings.initial_balance * settings.investment_allocation / HUNDRED
    if monthly:
        final = monthly[-1]
        final_cash, final_invested, final_total = final.cash, final.invested, final.total
        lowest_total = min(p.total for p in monthly)
        start_month = monthly[0].date.strftime("%Y-%m")
        end_month = final.date.strftime("%Y-%m")
    else:
        final_cash = round_half_up(settings.initial_balance - initial_invested)
        final_invested = round_half_up(initial_invested)
        final_total = round_half_up(settings.initial_balance)
        lowest_total = final_total
        start_month = end_month = None

    return {
        "months": len(monthly),
        "start_month": start_month,
        "end_month": end_month,
        "initial_balance": float(settings.initial_balance),
        "total_income": float(total_income),
        "total_expense": float(total_expense),
        "total_investment_return": float(total_return),
        "final_cash": float(final_cash),
        "final_invested": float(final_invested),
        "final_total": float(final_total),
        "net_change": float(final_total - settings.initial_balance),
        "lowest_total": float(lowest_total),
        "negative_cash_months": sum(1 for p in monthly if p.cash < 0),
    }
