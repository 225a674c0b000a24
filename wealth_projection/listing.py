"""Searching, filtering and sorting transaction lists."""

from __future__ import annotations

from typing import Iterable, List

from .data_models import EXPENSE, INCOME, Transaction

FILTER_OPTIONS = ("all", "income", "expense", "enabled", "disabled")
SORT_OPTIONS = ("date", "amount", "name")


def filter_transactions(
    transactions: Iterable[Transaction], query: str = "", filter_by: str = "all"
) -> List[Transaction]:
    """Return the transactions whose description contains ``query``
    (case-insensitive) and that match ``filter_by``."""
    if filter_by not in FILTER_OPTIONS:
        raise ValueError(f"Unknown filter: {filter_by}")
    result = list(transactions)
    if query:
        needle = query.lower()
        result = [t for t in result if needle in t.description.lower()]
    if filter_by == "income":
        result = [t for t in result if t.type == INCOME]
    elif filter_by == "expense":
        result = [t for t in result if t.type == EXPENSE]
    elif filter_by == "enabled":
        result = [t for t in result if t.enabled]
    elif filter_by == "disabled":
        result = [t for t in result if not t.enabled]
    return result


def sort_transactions(
    transactions: Iterable[Transaction], sort_by: str = "date", descending: bool = True
) -> List[Transaction]:
    if sort_by == "date":
        key = lambda t: t.start_date
    elif sort_by == "amount":
        key = lambda t: t.amount
    elif sort_by == "name":
        key = lambda t: t.description.casefold()
    else:
        raise ValueError(f"Unknown sort key: {sort_by}")
    return sorted(transactions, key=key, reverse=descending)
