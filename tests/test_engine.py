from datetime import date
from decimal import Decimal

import pytest

from tests.helpers import make_rule, make_settings
from wealth_projection.engine import aggregate, compute_projection, simulate, summarize_projection, transform

START = date(2026, 1, 1)


def test_series_length_matches_horizon():
    settings = make_settings(balance="5000", years=3, rate="0.4", allocation="60")
    monthly = simulate([make_rule("pay", amount="900")], settings, start=START)

    assert len(monthly) == 36
    assert len(aggregate(monthly, "yearly")) == 3
    assert monthly[0].date == START
    assert monthly[-1].date == date(2028, 12, 1)
    assert monthly[0].date_label == "Jan 2026"


def test_start_date_is_truncated_to_first_of_month():
    monthly = simulate([], make_settings(years=1), start=date(2026, 5, 19))

    assert monthly[0].date == date(2026, 5, 1)
    assert monthly[1].date == date(2026, 6, 1)


def test_zero_years_yields_empty_series():
    settings = make_settings(balance="1000", years=0)
    series, monthly = compute_projection([make_rule("pay")], settings, period="yearly", mode="absolute", start=START)

    assert monthly == []
    assert series == []


def test_zero_transactions_compound_invested_balance():
    settings = make_settings(balance="10000", years=1, rate="1", allocation="75")
    monthly = simulate([], settings, start=START)

    first, second = monthly[0], monthly[1]
    assert (first.invested, first.cash, first.investment_return) == (7500, 2500, 0)
    assert second.investment_return == 75
    assert second.invested == 7575
    assert second.cash == 2500
    assert second.total_income == Decimal("75")
    assert second.income_breakdown == {"investmentReturn": Decimal("75")}
    assert second.amounts == {"investmentReturn": Decimal("75")}


def test_first_month_never_earns_a_return():
    settings = make_settings(balance="1000", years=1, rate="10", allocation="100")
    monthly = simulate([], settings, start=START)

    assert monthly[0].investment_return == 0
    assert "investmentReturn" not in monthly[0].income_breakdown
    assert monthly[1].investment_return == 100


def test_one_time_expense_lands_in_a_single_month():
    rule = make_rule("laptop", amount="1200", type="expense", frequency="once", start=date(2026, 4, 17))
    monthly = simulate([rule], make_settings(balance="5000", years=1), start=START)

    months_with_expense = [i for i, p in enumerate(monthly) if "laptop" in p.expense_breakdown]
    assert months_with_expense == [3]
    assert monthly[3].expense_breakdown == {"laptop": Decimal("1200")}
    assert monthly[3].amounts == {"laptop": Decimal("-1200")}
    assert monthly[3].total_expense == Decimal("-1200")


def test_disabled_rules_are_excluded():
    rules = [make_rule("pay", amount="500"), make_rule("old", amount="999", enabled=False)]
    monthly = simulate(rules, make_settings(years=1), start=START)

    assert all("old" not in p.amounts for p in monthly)
    assert all(p.total_income == Decimal("500") for p in monthly)


def test_deficit_is_covered_from_invested_balance_as_far_as_possible():
    settings = make_settings(balance="300", years=1, allocation="100")
    rule = make_rule("repair", amount="500", type="expense", frequency="once", start=START)
    monthly = simulate([rule], settings, start=START)

    assert monthly[0].cash == -200
    assert monthly[0].invested == 0
    assert monthly[0].total == -200
    # Nothing left to withdraw: cash stays negative.
    assert monthly[-1].cash == -200


def test_surplus_sweep_uses_the_monthly_flow():
    settings = make_settings(balance="1000", years=1, allocation="50")
    monthly = simulate([make_rule("pay", amount="200")], settings, start=START)

    assert monthly[0].cash == 600
    assert monthly[0].invested == 600
    assert monthly[1].cash == 700
    assert monthly[1].invested == 700


def test_return_is_added_before_cash_flow_is_applied():
    settings = make_settings(balance="1000", years=1, rate="10", allocation="100")
    monthly = simulate([make_rule("bills", amount="50", type="expense")], settings, start=START)

    assert monthly[0].invested == 950
    assert monthly[1].investment_return == 95
    assert monthly[1].invested == 995
    assert monthly[1].total_income == Decimal("95")
    assert monthly[1].net_cash_flow == Decimal("45")
    assert monthly[1].total_expense == Decimal("-50")


def test_net_cash_flow_includes_investment_return():
    settings = make_settings(balance="20000", years=2, rate="0.7", allocation="80")
    rules = [make_rule("pay", amount="2500"), make_rule("rent", amount="1100", type="expense")]
    monthly = simulate(rules, settings, start=START)

    for point in monthly:
        expense = sum(point.expense_breakdown.values(), Decimal("0"))
        assert point.net_cash_flow == point.total_income - expense
        assert point.total_expense == -expense


def test_total_is_rounded_from_unrounded_balances():
    settings = make_settings(balance="1", years=1, allocation="50")
    monthly = simulate([], settings, start=START)

    assert monthly[0].cash == 1
    assert monthly[0].invested == 1
    assert monthly[0].total == 1


def test_rounding_is_not_compounded_over_long_horizons():
    settings = make_settings(balance="1000", years=50, rate="0.3", allocation="100")
    monthly = simulate([], settings, start=START)

    expected = Decimal("1000") * Decimal("1.003") ** 599
    assert abs(monthly[-1].invested - expected) <= 1


def test_invested_grows_monotonically_without_expenses():
    settings = make_settings(balance="5000", years=5, rate="0.5", allocation="40")
    rules = [make_rule("pay", amount="700"), make_rule("bonus", amount="3000", frequency="yearly")]
    monthly = simulate(rules, settings, start=START)

    invested = [p.invested for p in monthly]
    assert all(b >= a for a, b in zip(invested, invested[1:]))


def test_yearly_aggregation_sums_flows_and_snapshots_wealth():
    settings = make_settings(years=1, allocation="50")
    rules = [make_rule("a", amount="1000"), make_rule("b", amount="1000")]
    monthly = simulate(rules, settings, start=START)
    yearly = aggregate(monthly, "yearly")

    assert len(yearly) == 1
    bucket = yearly[0]
    assert bucket.date_label == "2026"
    assert bucket.total_income == Decimal("24000")
    assert bucket.cash == monthly[11].cash == 12000
    assert bucket.invested == monthly[11].invested == 12000
    assert bucket.income_breakdown == {"a": Decimal("12000"), "b": Decimal("12000")}


def test_yearly_bucket_keys_are_union_of_months():
    rules = [
        make_rule("early", amount="100", end=date(2026, 3, 31)),
        make_rule("late", amount="40", type="expense", start=date(2026, 11, 1)),
    ]
    yearly = aggregate(simulate(rules, make_settings(years=1), start=START), "yearly")

    assert yearly[0].income_breakdown == {"early": Decimal("300")}
    assert yearly[0].expense_breakdown == {"late": Decimal("80")}
    assert yearly[0].amounts == {"early": Decimal("300"), "late": Decimal("-80")}


def test_yearly_buckets_follow_calendar_years():
    monthly = simulate([make_rule("pay")], make_settings(years=1), start=date(2026, 7, 1))
    yearly = aggregate(monthly, "yearly")

    assert [b.date_label for b in yearly] == ["2026", "2027"]
    assert yearly[0].date == date(2026, 7, 1)
    assert yearly[0].total_income == Decimal("600")
    assert yearly[1].cash == monthly[-1].cash


def test_yearly_investment_return_sums_reported_values():
    settings = make_settings(balance="10000", years=1, rate="1", allocation="100")
    monthly = simulate([], settings, start=START)
    yearly = aggregate(monthly, "yearly")

    assert yearly[0].investment_return == sum(p.investment_return for p in monthly)


def test_monthly_aggregation_is_identity():
    monthly = simulate([make_rule("pay")], make_settings(years=1), start=START)

    assert aggregate(monthly, "monthly") == monthly


def test_relative_mode_is_identity():
    monthly = simulate([make_rule("pay")], make_settings(years=2, rate="0.5", allocation="50"), start=START)
    yearly = aggregate(monthly, "yearly")

    assert transform(yearly, "relative") == yearly
    assert transform(monthly, "relative") == monthly


def test_absolute_mode_accumulates_flows():
    series, monthly = compute_projection(
        [make_rule("pay", amount="100")], make_settings(years=1), mode="absolute", start=START
    )

    assert all(p.total_income == Decimal("100") for p in monthly)
    for i, point in enumerate(series):
        assert point.total_income == Decimal(100 * (i + 1))
        assert point.income_breakdown == {"pay": Decimal(100 * (i + 1))}
        assert point.amounts == {"pay": Decimal(100 * (i + 1))}
        assert point.cash == monthly[i].cash


def test_absolute_mode_reports_expenses_as_magnitudes():
    rules = [make_rule("rent", amount="30", type="expense")]
    series, _ = compute_projection(rules, make_settings(balance="1000", years=1), mode="absolute", start=START)

    assert series[2].expense_breakdown == {"rent": Decimal("90")}
    assert series[2].amounts == {"rent": Decimal("-90")}
    assert series[2].total_expense == Decimal("-90")
    assert series[2].net_cash_flow == Decimal("-90")


def test_absolute_mode_shares_one_accumulator_per_id():
    rules = [
        make_rule("x", amount="100", frequency="once", start=START),
        make_rule("x", amount="30", type="expense", start=date(2026, 2, 1)),
    ]
    series, _ = compute_projection(rules, make_settings(years=1), mode="absolute", start=START)

    assert series[0].income_breakdown == {"x": Decimal("100")}
    assert series[1].income_breakdown == {}
    assert series[1].expense_breakdown == {"x": Decimal("70")}
    assert series[1].amounts == {"x": Decimal("70")}
    assert series[4].expense_breakdown == {"x": Decimal("20")}
    assert series[4].amounts == {"x": Decimal("-20")}


def test_absolute_yearly_wealth_fields_are_snapshots():
    settings = make_settings(balance="1000", years=2, rate="0.5", allocation="50")
    series, monthly = compute_projection(
        [make_rule("pay", amount="250")], settings, period="yearly", mode="absolute", start=START
    )

    assert abs(series[1].total_income - sum(p.total_income for p in monthly)) < Decimal("0.000001")
    assert series[1].total == monthly[-1].total
    assert series[0].total == monthly[11].total


def test_stages_do_not_mutate_their_input():
    monthly = simulate([make_rule("pay")], make_settings(years=1, allocation="10"), start=START)
    before = [p.income_breakdown.copy() for p in monthly]
    transform(aggregate(monthly, "yearly"), "absolute")
    transform(monthly, "absolute")

    assert [p.income_breakdown for p in monthly] == before


def test_unknown_period_and_mode_raise():
    with pytest.raises(ValueError):
        aggregate([], "weekly")
    with pytest.raises(ValueError):
        transform([], "cumulative")


def test_summary_totals():
    rules = [make_rule("pay", amount="100"), make_rule("food", amount="40", type="expense")]
    settings = make_settings(years=1)
    monthly = simulate(rules, settings, start=START)
    summary = summarize_projection(monthly, settings)

    assert summary["months"] == 12
    assert summary["start_month"] == "2026-01"
    assert summary["end_month"] == "2026-12"
    assert summary["total_income"] == 1200.0
    assert summary["total_expense"] == 480.0
    assert summary["total_investment_return"] == 0.0
    assert summary["final_total"] == 720.0
    assert summary["net_change"] == 720.0
    assert summary["negative_cash_months"] == 0


def test_summary_of_empty_series_reports_initial_split():
    settings = make_settings(balance="1000", years=0, allocation="25")
    summary = summarize_projection([], settings)

    assert summary["months"] == 0
    assert summary["start_month"] is None
    assert summary["final_cash"] == 750.0
    assert summary["final_invested"] == 250.0
    assert summary["final_total"] == 1000.0
