import os
from datetime import date
from typing import Optional

from flask import Flask, jsonify, request

from wealth_projection.calendar_month import month_calendar
from wealth_projection.data_models import DEFAULT_SETTINGS, MONTHLY, RELATIVE
from wealth_projection.engine import compute_projection, summarize_projection
from wealth_projection.schema import (
    ProjectionInputError,
    projection_from_dict,
    series_to_list,
    settings_to_dict,
    transaction_to_dict,
    validate_horizon,
    validate_view,
)
from wealth_projection.utils import parse_year_month

app = Flask(__name__)
app.config["MAX_PROJECTION_YEARS"] = int(os.environ.get("WEALTH_PROJECTION_MAX_YEARS", "100"))


def _request_json() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ProjectionInputError("Request body must be a JSON object")
    return data


def _parse_month(value: Optional[str], field: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_year_month(str(value))
    except ValueError as exc:
        raise ProjectionInputError(f"{field}: {exc}") from exc


def _load_projection(data: dict, start: Optional[date]):
    projection = projection_from_dict(data)
    validate_horizon(projection.settings, start or date.today())
    max_years = app.config["MAX_PROJECTION_YEARS"]
    if projection.settings.projection_years > max_years:
        raise ProjectionInputError(f"projectionYears may not exceed {max_years}")
    return projection


@app.errorhandler(ProjectionInputError)
def handle_input_error(exc: ProjectionInputError):
    app.logger.info("Rejected request to %s: %s", request.path, exc)
    return jsonify({"error": str(exc)}), 400


@app.get("/api/defaults")
def defaults():
    return jsonify({"settings": settings_to_dict(DEFAULT_SETTINGS)})


@app.post("/api/projection")
def projection():
    data = _request_json()
    period = data.get("period", MONTHLY)
    mode = data.get("mode", RELATIVE)
    validate_view(period, mode)
    start = _parse_month(data.get("start"), "start")
    proj = _load_projection(data, start)

    series, monthly = compute_projection(proj.transactions, proj.settings, period=period, mode=mode, start=start)
    return jsonify(
        {
            "summary": summarize_projection(monthly, proj.settings),
            "series": series_to_list(series),
            "monthly": series_to_list(monthly),
        }
    )


@app.post("/api/calendar")
def calendar_month():
    data = _request_json()
    target = _parse_month(data.get("month"), "month")
    if target is None:
        raise ProjectionInputError("month is required (YYYY-MM)")
    start = _parse_month(data.get("start"), "start")
    proj = _load_projection(data, start)

    _, monthly = compute_projection(proj.transactions, proj.settings, start=start)
    month_data = month_calendar(proj.transactions, monthly, target.year, target.month)
    return jsonify(
        {
            "month": target.strftime("%Y-%m"),
            "summary": {key: float(value) for key, value in month_data["summary"].items()},
            "days": {
                day.isoformat(): [transaction_to_dict(t) for t in rules]
                for day, rules in month_data["days"].items()
            },
        }
    )


if __name__ == "__main__":
    print("Starting wealth projection API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
