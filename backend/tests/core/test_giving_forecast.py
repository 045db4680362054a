"""Giving forecast — monthly buckets, trend slope, seasonal projections."""

from datetime import datetime, timezone

from ministry.core.giving_forecast import (
    build_forecast, forecast_confidence, group_by_month, insight_prompt,
    linear_trend, membership_mrr, project_months, seasonal_multiplier,
)

NOW = datetime(2026, 10, 15, tzinfo=timezone.utc)


def _gift(amount, month, day=5, recurring=False, member_id=None, fund=None):
    return {
        "amount": amount,
        "created_at": datetime(2026, month, day, tzinfo=timezone.utc),
        "is_recurring": recurring,
        "member_id": member_id,
        "fund_name": fund,
    }


def test_group_by_month_splits_recurring_and_one_time():
    rows = group_by_month([
        _gift(100, 9, recurring=True), _gift(40, 9), _gift(10, 8),
    ])
    assert [r["month"] for r in rows] == ["2026-08", "2026-09"]
    september = rows[1]
    assert september["total"] == 140
    assert september["count"] == 2
    assert september["recurring"] == 100
    assert september["one_time"] == 40


def test_group_by_month_accepts_naive_timestamps():
    rows = group_by_month([{"amount": 5, "created_at": datetime(2026, 1, 31, 23, 0)}])
    assert rows[0]["month"] == "2026-01"


def test_linear_trend_needs_three_points():
    assert linear_trend([100, 300]) == 0.0


def test_linear_trend_least_squares_slope():
    assert linear_trend([100, 200, 300]) == 100
    assert linear_trend([300, 200, 100]) == -100


def test_seasonal_multipliers():
    assert seasonal_multiplier(12) == 1.3
    assert seasonal_multiplier(7) == 0.85
    assert seasonal_multiplier(4) == 1.0


def test_confidence_decays_and_floors_at_50():
    assert forecast_confidence(1) == 88
    assert forecast_confidence(3) == 74
    assert forecast_confidence(12) == 50


def test_membership_mrr_uses_tier_amounts():
    assert membership_mrr({"partner": 2, "covenant": 1, "free": 40}) == 250


def test_projections_never_negative():
    rows = project_months(
        now=NOW, months=3, recurring_revenue=0, avg_total=0, avg_recurring=0,
        trend=-1000, history_len=6,
    )
    assert all(r["projected"] == 0 for r in rows)


def test_projection_months_roll_over_year():
    rows = project_months(
        now=NOW, months=4, recurring_revenue=100, avg_total=0, avg_recurring=0,
        trend=0, history_len=0,
    )
    assert [r["month"] for r in rows] == ["2026-11", "2026-12", "2027-01", "2027-02"]


def test_build_forecast_with_membership_only():
    forecast = build_forecast(
        donations=[], current_mrr=0, tier_counts={"partner": 2, "covenant": 1},
        now=NOW, months=3, annual_goal=100_000,
    )
    assert [f["projected"] for f in forecast["forecasts"]] == [275, 325, 225]
    assert [f["confidence"] for f in forecast["forecasts"]] == [88, 81, 74]
    assert forecast["current"]["total_mrr"] == 250
    assert forecast["current"]["trend"]["direction"] == "stable"
    assert forecast["annual"]["projected_annual"] == 600
    assert forecast["annual"]["goal_progress"] == 0
    assert forecast["metrics"]["avg_donation"] == 0
    assert forecast["insights"] == ""


def test_build_forecast_fund_and_donor_metrics():
    donations = [
        _gift(600, 9, member_id="a", fund="Missions"),
        _gift(100, 10, member_id="b", recurring=True),
        _gift(100, 10, member_id="b", recurring=True),
    ]
    forecast = build_forecast(
        donations=donations, current_mrr=100, tier_counts={}, now=NOW,
        months=1, annual_goal=8000,
    )
    assert forecast["by_fund"][0] == {"fund": "Missions", "total": 600, "percentage": 75.0}
    assert forecast["by_fund"][1]["fund"] == "General"
    assert forecast["metrics"]["total_donors"] == 2
    assert forecast["metrics"]["top_donor_count"] == 1
    assert forecast["metrics"]["recurring_donor_count"] == 1
    assert forecast["annual"]["ytd_total"] == 800
    assert forecast["annual"]["goal_progress"] == 10.0


def test_insight_prompt_mentions_key_figures():
    forecast = build_forecast(
        donations=[], current_mrr=1200, tier_counts={"partner": 3},
        now=NOW, months=1, annual_goal=1,
    )
    prompt = insight_prompt(forecast)
    assert "$1,200" in prompt
    assert "Partners: 3" in prompt
