import copy
import json
from datetime import date
from decimal import Decimal
from pathlib import Path

from wealth_projection.data_models import ProjectionSettings, Transaction


def write_projection(tmp_path: Path, data: dict, filename: str = "projection.json") -> Path:
    path = tmp_path / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clone_projection(data: dict) -> dict:
    return copy.deepcopy(data)


def make_settings(balance="0", years=1, rate="0", allocation="0") -> ProjectionSettings:
    return ProjectionSettings(
        initial_balance=Decimal(balance),
        projection_years=years,
        monthly_return_rate=Decimal(rate),
        investment_allocation=Decimal(allocation),
    )


def make_rule(
    rule_id: str,
    amount="100",
    type="income",
    frequency="monthly",
    start=date(2026, 1, 1),
    end=None,
    enabled=True,
    description="",
) -> Transaction:
    return Transaction(
        id=rule_id,
        amount=Decimal(amount),
        type=type,
        frequency=frequency,
        start_date=start,
        end_date=end,
        enabled=enabled,
        description=description or rule_id,
    )
