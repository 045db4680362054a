"""Member dashboard counters."""

from datetime import datetime, timedelta, timezone

from ministry.core.member_stats import dashboard_stats

NOW = datetime(2026, 9, 30, tzinfo=timezone.utc)


def test_dashboard_counts_only_content_activity():
    activities = [
        {"activity_type": "teaching_viewed", "created_at": NOW - timedelta(days=1)},
        {"activity_type": "prophecy_viewed", "created_at": NOW - timedelta(days=10)},
        {"activity_type": "devotional_read", "created_at": NOW - timedelta(days=60)},
        {"activity_type": "ai_chat", "created_at": NOW - timedelta(days=1)},
    ]
    stats = dashboard_stats(activities, NOW - timedelta(days=400), NOW, 3, 2)
    assert stats == {
        "total_content_consumed": 3,
        "content_this_week": 1,
        "content_this_month": 2,
        "days_since_joining": 400,
        "current_streak": 3,
        "seasons_joined": 2,
    }


def test_days_since_joining_never_negative():
    stats = dashboard_stats([], NOW + timedelta(days=1), NOW, 0, 0)
    assert stats["days_since_joining"] == 0
