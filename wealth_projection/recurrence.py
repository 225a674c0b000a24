"""Recurrence rules: when does a transaction contribute?

Two granularities are supported. The simulator works on whole calendar
months (``is_active_in_month``) so a rule's day-of-month never changes which
month it lands in. The calendar works on individual days (``occurs_on_day``).
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List

from .data_models import MONTHLY, ONCE, YEARLY, Transaction
from .utils import month_index, months_between


def is_active_in_month(rule: Transaction, target: date) -> bool:
    """Return whether ``rule`` contributes in the calendar month of ``target``.

    ``target`` may be any date within the month. The range check compares
    months, not days: a rule starting on the 15th is active in that month, and
    a rule ending on the 3rd is still active in the month of its end date.
    The ``enabled`` flag is not consulted here; callers filter on it.
    """
    current = month_index(target)
    if current < month_index(rule.start_date):
        return False
    if rule.end_date is not None and current > month_index(rule.end_date):
        return False

    distance = months_between(rule.start_date, target)
    if rule.frequency == ONCE:
        return distance == 0
    if rule.frequency == MONTHLY:
        return True
    if rule.frequency == YEARLY:
        return distance % 12 == 0
    return False


def active_in_month(rules: Iterable[Transaction], target: date) -> List[Transaction]:
    return [rule for rule in rules if is_active_in_month(rule, target)]


def occurs_on_day(rule: Transaction, day: date) -> bool:
    """Return whether ``rule`` falls on the exact calendar ``day``.

    Monthly rules recur on the day-of-month of their start date and yearly
    rules on its month and day. A monthly rule starting on the 31st therefore
    skips shorter months.
    """
    if day < rule.start_date:
        return False
    if rule.end_date is not None and day > rule.end_date:
        return False

    start = rule.start_date
    if rule.frequency == ONCE:
        return day == start
    if rule.frequency == MONTHLY:
        return day.day == start.day
    if rule.frequency == YEARLY:
        return day.day == start.day and day.month == start.month
    return False


def transactions_on_day(rules: Iterable[Transaction], day: date) -> List[Transaction]:
    return [rule for rule in rules if occurs_on_day(rule, day)]
