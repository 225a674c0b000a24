"""Month calendar: which rules fall on which day, and the month's totals.

The totals come from the raw monthly simulation so they agree with the
projection; the per-day entries come from day-grained matching and include
disabled rules.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from .data_models import DataPoint, Transaction
from .recurrence import transactions_on_day

ZERO = Decimal("0")


def find_month_point(monthly: Sequence[DataPoint], year: int, month: int) -> Optional[DataPoint]:
    for point in monthly:
        if point.date.year == year and point.date.month == month:
            return point
    return None


def month_summary(point: Optional[DataPoint]) -> Dict[str, Decimal]:
    """Totals for the calendar header. Expenses are a positive magnitude."""
    if point is None:
        return {"totalIncome": ZERO, "totalExpense": ZERO, "netFlow": ZERO, "investmentReturn": ZERO}
    return {
        "totalIncome": point.total_income,
        "totalExpense": -point.total_expense if point.total_expense else ZERO,
        "netFlow": point.net_cash_flow,
        "investmentReturn": point.investment_return,
    }


def month_calendar(
    transactions: Iterable[Transaction], monthly: Sequence[DataPoint], year: int, month: int
) -> Dict[str, object]:
    """Return the month's summary and the rules falling on each of its days.

    Only days with at least one rule appear in ``days``.
    """
    rules = list(transactions)
    days: Dict[date, List[Transaction]] = {}
    for day_number in range(1, calendar.monthrange(year, month)[1] + 1):
        day = date(year, month, day_number)
        matches = transactions_on_day(rules, day)
        if matches:
            days[day] = matches
    return {
        "summary": month_summary(find_month_point(monthly, year, month)),
        "days": days,
    }
