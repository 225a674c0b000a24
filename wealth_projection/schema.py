"""Reading and writing projection documents.

Projection documents are JSON objects using the application's camelCase keys::

    {
      "id": "...", "name": "Plan A", "createdAt": "2026-01-05T10:00:00Z",
      "settings": {"initialBalance": 10000, "projectionYears": 10,
                   "monthlyReturnRate": 0.5, "investmentAllocation": 75},
      "transactions": [
        {"id": "salary", "description": "Salary", "amount": 3000,
         "type": "income", "frequency": "monthly",
         "startDate": "2026-01-01", "endDate": null,
         "color": "#22c55e", "enabled": true}
      ]
    }

This is the boundary of the engine: everything that reaches ``engine`` has
been checked here, so the engine itself never sees NaN, infinities, unknown
enumeration values or colliding ids.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

from .data_models import (
    DEFAULT_SETTINGS,
    DISPLAY_MODES,
    FREQUENCIES,
    INVESTMENT_RETURN_KEY,
    TIME_PERIODS,
    TRANSACTION_TYPES,
    DataPoint,
    Projection,
    ProjectionSettings,
    Transaction,
)
from .utils import first_of_month, month_index, parse_iso_date, to_decimal


class ProjectionInputError(ValueError):
    """Raised when a projection document or view parameter is invalid."""


def _number(data: Mapping[str, Any], key: str, default: Any = None) -> Decimal:
    value = data.get(key, default)
    if value is None:
        raise ProjectionInputError(f"Missing numeric field '{key}'")
    try:
        return to_decimal(value)
    except ValueError as exc:
        raise ProjectionInputError(f"Field '{key}': {exc}") from exc


def _date(value: Any, key: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ProjectionInputError(f"Field '{key}' must be a date string")
    try:
        return parse_iso_date(value)
    except ValueError as exc:
        raise ProjectionInputError(f"Field '{key}': {exc}") from exc


def settings_from_dict(data: Mapping[str, Any] | None) -> ProjectionSettings:
    """Build settings, filling absent fields from ``DEFAULT_SETTINGS``."""
    data = data or {}
    if not isinstance(data, Mapping):
        raise ProjectionInputError("'settings' must be an object")
    years = _number(data, "projectionYears", DEFAULT_SETTINGS.projection_years)
    if years != years.to_integral_value() or years < 0:
        raise ProjectionInputError(f"projectionYears must be a non-negative integer; got {years}")
    return ProjectionSettings(
        initial_balance=_number(data, "initialBalance", DEFAULT_SETTINGS.initial_balance),
        projection_years=int(years),
        monthly_return_rate=_number(data, "monthlyReturnRate", DEFAULT_SETTINGS.monthly_return_rate),
        investment_allocation=_number(data, "investmentAllocation", DEFAULT_SETTINGS.investment_allocation),
    )


def transaction_from_dict(data: Mapping[str, Any]) -> Transaction:
    tx_id = data.get("id")
    if not isinstance(tx_id, str) or not tx_id:
        raise ProjectionInputError("Transaction id must be a non-empty string")
    if tx_id == INVESTMENT_RETURN_KEY:
        raise ProjectionInputError(f"Transaction id '{INVESTMENT_RETURN_KEY}' is reserved")

    tx_type = str(data.get("type", "")).lower()
    if tx_type not in TRANSACTION_TYPES:
        raise ProjectionInputError(f"Transaction {tx_id}: type must be 'income' or 'expense'; got {tx_type!r}")
    frequency = str(data.get("frequency", "")).lower()
    if frequency not in FREQUENCIES:
        raise ProjectionInputError(
            f"Transaction {tx_id}: frequency must be one of {', '.join(FREQUENCIES)}; got {frequency!r}"
        )

    amount = _number(data, "amount")
    if amount < 0:
        raise ProjectionInputError(f"Transaction {tx_id}: amount must not be negative")

    if "startDate" not in data:
        raise ProjectionInputError(f"Transaction {tx_id}: missing startDate")
    start_date = _date(data["startDate"], "startDate")
    end_raw = data.get("endDate")
    end_date = _date(end_raw, "endDate") if end_raw else None

    enabled = data.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ProjectionInputError(f"Transaction {tx_id}: enabled must be true or false; got {enabled!r}")

    return Transaction(
        id=tx_id,
        amount=amount,
        type=tx_type,
        frequency=frequency,
        start_date=start_date,
        end_date=end_date,
        enabled=enabled,
        description=str(data.get("description") or ""),
        color=str(data.get("color") or ""),
    )


def transactions_from_list(items: Iterable[Mapping[str, Any]]) -> List[Transaction]:
    transactions: List[Transaction] = []
    seen = set()
    for item in items:
        if not isinstance(item, Mapping):
            raise ProjectionInputError("Each transaction must be an object")
        tx = transaction_from_dict(item)
        if tx.id in seen:
            raise ProjectionInputError(f"Duplicate transaction id: {tx.id}")
        seen.add(tx.id)
        transactions.append(tx)
    return transactions


def projection_from_dict(data: Mapping[str, Any]) -> Projection:
    """Build a ``Projection`` from a full or bare projection document.

    A bare document only carries ``settings`` and ``transactions``; the
    remaining fields get neutral defaults.
    """
    if not isinstance(data, Mapping):
        raise ProjectionInputError("Projection document must be a JSON object")
    items = data.get("transactions") or []
    if not isinstance(items, list):
        raise ProjectionInputError("'transactions' must be a list")
    return Projection(
        id=str(data.get("id") or ""),
        name=str(data.get("name") or "Projection"),
        created_at=str(data.get("createdAt") or ""),
        settings=settings_from_dict(data.get("settings")),
        transactions=transactions_from_list(items),
    )


def load_projection(path: Union[str, Path]) -> Projection:
    """Read a projection document from a JSON file."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ProjectionInputError(f"{path}: invalid JSON ({exc})") from exc
    return projection_from_dict(data)


def validate_view(period: str, mode: str) -> None:
    if period not in TIME_PERIODS:
        raise ProjectionInputError(f"period must be 'monthly' or 'yearly'; got {period!r}")
    if mode not in DISPLAY_MODES:
        raise ProjectionInputError(f"mode must be 'relative' or 'absolute'; got {mode!r}")


def validate_horizon(settings: ProjectionSettings, start: date) -> None:
    """Reject a horizon whose last month falls after the last representable date."""
    last_month = month_index(first_of_month(start)) + settings.projection_years * 12 - 1
    if last_month > month_index(date.max):
        raise ProjectionInputError(
            f"A {settings.projection_years}-year projection starting {start:%Y-%m} runs past year {date.max.year}"
        )


def settings_to_dict(settings: ProjectionSettings) -> Dict[str, Any]:
    return {
        "initialBalance": float(settings.initial_balance),
        "projectionYears": settings.projection_years,
        "monthlyReturnRate": float(settings.monthly_return_rate),
        "investmentAllocation": float(settings.investment_allocation),
    }


def transaction_to_dict(tx: Transaction) -> Dict[str, Any]:
    return {
        "id": tx.id,
        "description": tx.description,
        "amount": float(tx.amount),
        "type": tx.type,
        "frequency": tx.frequency,
        "startDate": tx.start_date.isoformat(),
        "endDate": tx.end_date.isoformat() if tx.end_date else None,
        "color": tx.color,
        "enabled": tx.enabled,
    }


def projection_to_dict(projection: Projection) -> Dict[str, Any]:
    return {
        "id": projection.id,
        "name": projection.name,
        "createdAt": projection.created_at,
        "settings": settings_to_dict(projection.settings),
        "transactions": [transaction_to_dict(t) for t in projection.transactions],
    }


def _floats(mapping: Mapping[str, Decimal]) -> Dict[str, float]:
    return {key: float(value) for key, value in mapping.items()}


def point_to_dict(point: DataPoint) -> Dict[str, Any]:
    """Convert a data point into a JSON-serialisable dictionary for charts."""
    return {
        "date": point.date.strftime("%Y-%m"),
        "date_label": point.date_label,
        "cash": float(point.cash),
        "invested": float(point.invested),
        "total": float(point.total),
        "total_income": float(point.total_income),
        "total_expense": float(point.total_expense),
        "net_cash_flow": float(point.net_cash_flow),
        "investment_return": float(point.investment_return),
        "income_breakdown": _floats(point.income_breakdown),
        "expense_breakdown": _floats(point.expense_breakdown),
        "amounts": _floats(point.amounts),
    }


def series_to_list(series: Iterable[DataPoint]) -> List[Dict[str, Any]]:
    return [point_to_dict(point) for point in series]
