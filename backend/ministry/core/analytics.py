"""Admin Analytics — member, engagement, and giving aggregates over plain rows.

Invariants:
    - Never-active members (no activity row ever) report days_inactive = NEVER_ACTIVE_DAYS
    - Inactivity is measured from each member's all-time latest activity (`last_seen`),
      never from the windowed activity list
    - At-risk threshold is AT_RISK_DAYS of inactivity
    - Percentages are 0 when the denominator is 0
"""

from collections import Counter
from datetime import datetime, timedelta

from ministry.core.access import TIER_HIERARCHY, normalize_tier
from ministry.core.dates import days_between, ensure_utc, month_key

NEVER_ACTIVE_DAYS = 999
AT_RISK_DAYS = 30
AT_RISK_LIMIT = 10
TOP_ACTIVE_LIMIT = 5


def full_name(member: dict) -> str:
    return f"{member.get('first_name') or ''} {member.get('last_name') or ''}".strip()


def activity_score(actions: int) -> int:
    return min(100, round(actions / 2))


def latest_by_member(activities: list[dict]) -> dict[str, dict]:
    """member_id -> newest activity row among `activities`."""
    latest: dict[str, dict] = {}
    for a in activities:
        key = str(a["member_id"])
        if key not in latest or ensure_utc(a["created_at"]) > ensure_utc(latest[key]["created_at"]):
            latest[key] = a
    return latest


def member_metrics(
    members: list[dict],
    activities: list[dict],
    now: datetime,
    last_seen: dict[str, dict] | None = None,
) -> dict:
    """members: id, first_name, last_name, tier, created_at.
    activities: member_id, activity_type, created_at for the recent window.
    last_seen: member_id -> newest activity of all time; derived from
    `activities` when omitted.
    """
    now = ensure_utc(now)
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)
    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    recent_counts = Counter(
        str(a["member_id"]) for a in activities
        if ensure_utc(a["created_at"]) >= month_ago
    )
    latest = last_seen if last_seen is not None else latest_by_member(activities)

    by_tier = {t.value: 0 for t in TIER_HIERARCHY}
    for m in members:
        by_tier[normalize_tier(m.get("tier"))] += 1

    names = {str(m["id"]): full_name(m) for m in members}
    most_active = [
        {
            "id": member_id,
            "name": names.get(member_id, ""),
            "actions": count,
            "score": activity_score(count),
        }
        for member_id, count in recent_counts.most_common(TOP_ACTIVE_LIMIT)
    ]

    at_risk = []
    for m in members:
        last = latest.get(str(m["id"]))
        if last is None:
            at_risk.append({
                "id": str(m["id"]), "name": full_name(m),
                "days_inactive": NEVER_ACTIVE_DAYS, "last_action": "Never active",
            })
            continue
        idle = days_between(last["created_at"], now)
        if idle >= AT_RISK_DAYS:
            at_risk.append({
                "id": str(m["id"]), "name": full_name(m),
                "days_inactive": idle,
                "last_action": (last.get("activity_type") or "activity").replace("_", " "),
            })
    at_risk.sort(key=lambda r: r["days_inactive"], reverse=True)

    total = len(members)
    active = len(recent_counts)
    return {
        "total": total,
        "new_this_week": sum(1 for m in members if ensure_utc(m["created_at"]) >= week_ago),
        "new_this_month": sum(
            1 for m in members if ensure_utc(m["created_at"]) >= start_of_month
        ),
        "active_members": active,
        "engagement_rate": round(active / total * 100) if total else 0,
        "by_tier": by_tier,
        "most_active": most_active,
        "at_risk": at_risk[:AT_RISK_LIMIT],
    }


def engagement_metrics(activities: list[dict], now: datetime) -> dict:
    now = ensure_utc(now)
    month_ago = now - timedelta(days=30)
    by_type = Counter(
        a["activity_type"] for a in activities
        if ensure_utc(a["created_at"]) >= month_ago
    )
    daily = []
    for offset in range(6, -1, -1):
        day = (now - timedelta(days=offset)).date()
        daily.append({
            "date": day.isoformat(),
            "active_members": len({
                str(a["member_id"]) for a in activities
                if ensure_utc(a["created_at"]).date() == day
            }),
        })
    return {
        "activity_by_type": dict(by_type),
        "total_actions": sum(by_type.values()),
        "daily_active": daily,
    }


def giving_metrics(donations: list[dict], now: datetime) -> dict:
    now = ensure_utc(now)
    this_month = month_key(now)
    last_month_start = (now.replace(day=1) - timedelta(days=1))
    last_month = month_key(last_month_start)

    this_total = sum(
        float(d["amount"]) for d in donations
        if month_key(ensure_utc(d["created_at"])) == this_month
    )
    last_total = sum(
        float(d["amount"]) for d in donations
        if month_key(ensure_utc(d["created_at"])) == last_month
    )
    growth = round((this_total - last_total) / last_total * 100, 1) if last_total > 0 else 0
    amounts = [float(d["amount"]) for d in donations]
    return {
        "this_month": this_total,
        "last_month": last_total,
        "growth_percentage": growth,
        "average_gift": round(sum(amounts) / len(amounts), 2) if amounts else 0,
        "recurring_donors": len({
            str(d["member_id"]) for d in donations
            if d.get("is_recurring") and d.get("member_id")
        }),
    }
