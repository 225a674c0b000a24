"""Utility functions for the wealth projection engine.

This module provides helpers for parsing user input into Python data types and
for handling dates, including adding months, measuring the distance between
two months and normalizing year-month strings to ``datetime.date`` instances.
"""

from __future__ import annotations

import calendar
import math
from datetime import date
from decimal import ROUND_FLOOR, Decimal, InvalidOperation, getcontext
from typing import Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

Number = Union[int, float, str, Decimal]

HALF = Decimal("0.5")


def parse_year_month(ym: str) -> date:
    """Parse a YYYY-MM string into a ``date`` object (first day of month).

    Parameters
    ----------
    ym: str
        A string in the form ``"YYYY-MM"``. The day component, if present,
        will be ignored.

    Returns
    -------
    date
        A date object representing the first day of the specified month.

    Raises
    ------
    ValueError
        If the string is not a valid year-month.
    """
    try:
        parts = ym.split("-")
        if len(parts) < 2:
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        return date(year, month, 1)
    except Exception as exc:
        raise ValueError(f"Invalid year-month string: {ym}") from exc


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string. A bare ``YYYY-MM`` means the 1st."""
    try:
        parts = value.strip().split("-")
        if len(parts) == 2:
            return date(int(parts[0]), int(parts[1]), 1)
        if len(parts) != 3:
            raise ValueError
        return date(int(parts[0]), int(parts[1]), int(parts[2][:2]))
    except Exception as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def first_of_month(dt: date) -> date:
    return date(dt.year, dt.month, 1)


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_index(dt: date) -> int:
    """Absolute month number, so that month distances are plain subtraction."""
    return dt.year * 12 + (dt.month - 1)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``, clamped at zero."""
    months = month_index(end) - month_index(start)
    return months if months > 0 else 0


def month_label(dt: date) -> str:
    """Short label such as ``"Jan 2026"``."""
    return f"{calendar.month_abbr[dt.month]} {dt.year}"


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails or the value is not
    finite.
    """
    try:
        cleaned = value.replace(",", "")
        result = Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Numeric value must be finite: {value}")
    return result


def to_decimal(value: Number) -> Decimal:
    """Convert an int/float/str/Decimal into a finite ``Decimal``."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Numeric value must be finite: {value}")
        return value
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Numeric value must be finite: {value}")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    return decimal_from_str(str(value))


def round_half_up(value: Decimal) -> Decimal:
    """Round to a whole unit, halves toward positive infinity.

    ``2.5`` becomes ``3`` and ``-2.5`` becomes ``-2``.
    """
    return (value + HALF).to_integral_value(rounding=ROUND_FLOOR)
