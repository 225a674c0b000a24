"""Data models for the wealth projection engine.

This module defines dataclasses representing the entities the engine reads and
produces: transaction rules, projection settings, the projection document that
bundles them, and the data points of a projected series. Using dataclasses
makes it easy to construct, inspect and serialize these structures.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

ONCE = "once"
MONTHLY = "monthly"
YEARLY = "yearly"
FREQUENCIES = (ONCE, MONTHLY, YEARLY)

# Time periods share their spelling with the frequencies above.
TIME_PERIODS = (MONTHLY, YEARLY)

RELATIVE = "relative"
ABSOLUTE = "absolute"
DISPLAY_MODES = (RELATIVE, ABSOLUTE)

# Synthetic breakdown key under which monthly investment returns are reported.
INVESTMENT_RETURN_KEY = "investmentReturn"


@dataclass(frozen=True)
class Transaction:
    """A recurring or one-time income/expense rule.

    Attributes
    ----------
    id: str
        Stable identifier. Used as the key of breakdown maps, so ids must be
        unique within a projection.
    amount: Decimal
        Positive magnitude; the sign is implied by ``type``.
    type: str
        ``"income"`` or ``"expense"``.
    frequency: str
        ``"once"``, ``"monthly"`` or ``"yearly"``.
    start_date: date
        The rule has no effect before this date.
    end_date: Optional[date]
        When set, the rule has no effect after this date (inclusive).
    enabled: bool
        Disabled rules are left out of the simulation entirely.
    """

    id: str
    amount: Decimal
    type: str
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    enabled: bool = True
    description: str = ""
    color: str = ""


@dataclass(frozen=True)
class ProjectionSettings:
    """Scalar simulation parameters."""

    initial_balance: Decimal
    projection_years: int
    monthly_return_rate: Decimal  # percent per month, e.g. 0.5 for 0.5 %
    investment_allocation: Decimal  # percent of balance/surplus invested


DEFAULT_SETTINGS = ProjectionSettings(
    initial_balance=Decimal("10000"),
    projection_years=10,
    monthly_return_rate=Decimal("0.5"),
    investment_allocation=Decimal("75"),
)


@dataclass
class Projection:
    """A named set of settings and transactions, as the application stores it."""

    id: str
    name: str
    created_at: str
    settings: ProjectionSettings
    transactions: List[Transaction] = field(default_factory=list)


@dataclass(frozen=True)
class DataPoint:
    """One period of a projected series.

    Monthly points come straight out of the simulator; yearly points are
    aggregates of them. ``cash``, ``invested`` and ``total`` are always
    end-of-period snapshots rounded to whole units. ``total_expense`` is
    stored as a negative number while ``expense_breakdown`` holds positive
    magnitudes. ``amounts`` maps every transaction id seen in the period
    (plus ``investmentReturn``) to a signed amount: positive for income,
    negative for expenses.
    """

    date: date
    date_label: str
    cash: Decimal
    invested: Decimal
    total: Decimal
    total_income: Decimal
    total_expense: Decimal
    net_cash_flow: Decimal
    investment_return: Decimal
    income_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    expense_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    amounts: Dict[str, Decimal] = field(default_factory=dict)
