"""Member dashboard counters over a member's own activity rows."""

from datetime import datetime, timedelta

from ministry.core.dates import days_between, ensure_utc
from ministry.core.domain_types import CONTENT_ACTIVITY_TYPES


def dashboard_stats(
    activities: list[dict],
    joined_at: datetime,
    now: datetime,
    current_streak: int,
    seasons_joined: int,
) -> dict:
    now = ensure_utc(now)
    content = [
        ensure_utc(a["created_at"]) for a in activities
        if a["activity_type"] in CONTENT_ACTIVITY_TYPES
    ]
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)
    return {
        "total_content_consumed": len(content),
        "content_this_week": sum(1 for ts in content if ts >= week_ago),
        "content_this_month": sum(1 for ts in content if ts >= month_ago),
        "days_since_joining": max(0, days_between(joined_at, now)),
        "current_streak": current_streak,
        "seasons_joined": seasons_joined,
    }
