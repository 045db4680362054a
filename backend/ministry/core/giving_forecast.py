"""Giving Forecast — monthly aggregation, trend slope, and seasonal projections.

Invariants:
    - Pure: donations arrive as plain dicts, `now` is injected
    - Trend slope is 0 unless at least MIN_TREND_POINTS recent months exist
    - Projections are never negative
    - Confidence decays 7 points per month ahead and floors at 50

Design Decisions:
    - Least-squares slope over month indices 0..n-1 (closed-form sums): at most
      six points, no numeric library needed
    - Seasonal multipliers are fixed constants, not learned (ADR: too little history
      for anything else to be meaningful)
"""

from collections import defaultdict
from datetime import datetime

from ministry.core.access import TIER_MONTHLY_AMOUNT
from ministry.core.dates import add_months, ensure_utc, month_key

RECENT_WINDOW = 6
MIN_TREND_POINTS = 3
MAJOR_DONOR_THRESHOLD = 500
DEFAULT_FUND = "General"

# month number (1-12) -> multiplier
SEASONAL_MULTIPLIERS: dict[int, float] = {
    12: 1.3,
    11: 1.1,
    1: 0.9,
    7: 0.85,
    8: 0.85,
}


def group_by_month(donations: list[dict]) -> list[dict]:
    """Bucket donations into YYYY-MM rows, ascending by month."""
    buckets: dict[str, dict] = defaultdict(
        lambda: {"total": 0.0, "count": 0, "recurring": 0.0, "one_time": 0.0},
    )
    for d in donations:
        amount = float(d.get("amount") or 0)
        bucket = buckets[month_key(ensure_utc(d["created_at"]))]
        bucket["total"] += amount
        bucket["count"] += 1
        if d.get("is_recurring"):
            bucket["recurring"] += amount
        else:
            bucket["one_time"] += amount
    return [{"month": m, **buckets[m]} for m in sorted(buckets)]


def linear_trend(values: list[float]) -> float:
    """Least-squares slope of values against their index."""
    n = len(values)
    if n < MIN_TREND_POINTS:
        return 0.0
    sum_x = n * (n - 1) / 2
    sum_y = sum(values)
    sum_xy = sum(i * v for i, v in enumerate(values))
    sum_x2 = n * (n - 1) * (2 * n - 1) / 6
    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def seasonal_multiplier(month: int) -> float:
    return SEASONAL_MULTIPLIERS.get(month, 1.0)


def forecast_confidence(months_ahead: int) -> int:
    return max(50, 95 - months_ahead * 7)


def membership_mrr(tier_counts: dict[str, int]) -> int:
    return sum(
        count * TIER_MONTHLY_AMOUNT.get(tier, 0)
        for tier, count in tier_counts.items()
    )


def project_months(
    *,
    now: datetime,
    months: int,
    recurring_revenue: float,
    avg_total: float,
    avg_recurring: float,
    trend: float,
    history_len: int,
) -> list[dict]:
    """One projection per month ahead, starting next month."""
    projected_one_time = avg_total - avg_recurring
    forecasts = []
    for i in range(1, months + 1):
        year, month = add_months(now.year, now.month, i)
        factor = seasonal_multiplier(month)
        trend_adjustment = trend * (history_len + i)
        projected = max(
            0.0,
            (recurring_revenue + projected_one_time + trend_adjustment) * factor,
        )
        forecasts.append({
            "month": f"{year:04d}-{month:02d}",
            "projected": round(projected),
            "confidence": forecast_confidence(i),
            "breakdown": {
                "recurring": round(recurring_revenue),
                "projected_one_time": round(projected_one_time * factor),
                "seasonal_factor": factor,
            },
        })
    return forecasts


def _trend_direction(trend: float) -> str:
    if trend > 0:
        return "up"
    if trend < 0:
        return "down"
    return "stable"


def _percentage(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole > 0 else 0.0


def build_forecast(
    *,
    donations: list[dict],
    current_mrr: float,
    tier_counts: dict[str, int],
    now: datetime,
    months: int,
    annual_goal: int,
) -> dict:
    """Full forecast payload (everything except the AI insight text)."""
    monthly = group_by_month(donations)
    recent = monthly[-RECENT_WINDOW:]
    avg_total = sum(m["total"] for m in recent) / len(recent) if recent else 0.0
    avg_recurring = (
        sum(m["recurring"] for m in recent) / len(recent) if recent else 0.0
    )
    trend = linear_trend([m["total"] for m in recent])
    member_mrr = membership_mrr(tier_counts)

    forecasts = project_months(
        now=now, months=months,
        recurring_revenue=current_mrr + member_mrr,
        avg_total=avg_total, avg_recurring=avg_recurring,
        trend=trend, history_len=len(recent),
    )

    ytd_total = sum(
        m["total"] for m in monthly if m["month"].startswith(f"{now.year:04d}-")
    )
    remaining_this_year = 12 - now.month
    projected_annual = ytd_total + sum(
        f["projected"] for f in forecasts[:remaining_this_year]
    )

    grand_total = sum(float(d.get("amount") or 0) for d in donations)
    fund_totals: dict[str, float] = defaultdict(float)
    donor_totals: dict[str, float] = defaultdict(float)
    recurring_donors: set[str] = set()
    for d in donations:
        amount = float(d.get("amount") or 0)
        fund_totals[d.get("fund_name") or DEFAULT_FUND] += amount
        if d.get("member_id"):
            donor_totals[str(d["member_id"])] += amount
            if d.get("is_recurring"):
                recurring_donors.add(str(d["member_id"]))

    by_fund = sorted(
        (
            {
                "fund": fund,
                "total": total,
                "percentage": _percentage(total, grand_total or 1),
            }
            for fund, total in fund_totals.items()
        ),
        key=lambda row: row["total"],
        reverse=True,
    )

    return {
        "current": {
            "mrr": current_mrr,
            "membership_mrr": member_mrr,
            "total_mrr": current_mrr + member_mrr,
            "avg_monthly_total": round(avg_total),
            "trend": {
                "direction": _trend_direction(trend),
                "amount": round(trend),
                "percentage": _percentage(trend, avg_total),
            },
        },
        "membership": {
            "partners": tier_counts.get("partner", 0),
            "covenant_partners": tier_counts.get("covenant", 0),
            "partner_mrr": tier_counts.get("partner", 0) * TIER_MONTHLY_AMOUNT["partner"],
            "covenant_mrr": tier_counts.get("covenant", 0) * TIER_MONTHLY_AMOUNT["covenant"],
        },
        "annual": {
            "ytd_total": round(ytd_total),
            "projected_annual": round(projected_annual),
            "goal": annual_goal,
            "goal_progress": _percentage(ytd_total, annual_goal),
        },
        "historical": monthly[-12:],
        "forecasts": forecasts,
        "by_fund": by_fund,
        "metrics": {
            "total_donors": len(donor_totals),
            "avg_donation": round(grand_total / len(donations)) if donations else 0,
            "top_donor_count": sum(
                1 for v in donor_totals.values() if v > MAJOR_DONOR_THRESHOLD
            ),
            "recurring_donor_count": len(recurring_donors),
        },
        "insights": "",
    }


def insight_prompt(forecast: dict) -> str:
    """User message for the AI insight call."""
    current = forecast["current"]
    membership = forecast["membership"]
    annual = forecast["annual"]
    return (
        "Giving data analysis:\n"
        f"- Current recurring MRR: ${current['mrr']:,.0f}\n"
        f"- Membership MRR: ${current['membership_mrr']:,.0f}\n"
        f"- Average monthly: ${current['avg_monthly_total']:,}\n"
        f"- Trend: {current['trend']['direction']} "
        f"(${abs(current['trend']['amount']):,}/month)\n"
        f"- YTD total: ${annual['ytd_total']:,}\n"
        f"- Projected annual: ${annual['projected_annual']:,}\n"
        f"- Partners: {membership['partners']}, "
        f"Covenant partners: {membership['covenant_partners']}\n"
        f"- Major donors (>${MAJOR_DONOR_THRESHOLD}): "
        f"{forecast['metrics']['top_donor_count']}\n\n"
        "Provide specific recommendations to improve giving."
    )
