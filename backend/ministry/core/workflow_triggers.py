"""Workflow Triggers — member selection and message templating for automated workflows.

Invariants:
    - Pure: members, activity timestamps and recent executions arrive as plain data
    - Birthday/anniversary match on month/day of today + days_before
    - Anniversary requires at least one full calendar year and attaches `years`
    - An inactive member who received this workflow within REENGAGE_COOLDOWN_DAYS
      is skipped

Design Decisions:
    - match-case dispatch on trigger type: one function per trigger keeps each
      rule readable on its own
    - Template placeholders use str.replace, not str.format: admins type free text
      and stray braces must not raise
"""

import html
from datetime import date, datetime, timedelta

from ministry.core.dates import ensure_utc
from ministry.core.domain_types import WorkflowTrigger
from ministry.core.errors import ValidationFailedError

DEFAULT_DAYS_INACTIVE = 30
REENGAGE_COOLDOWN_DAYS = 30
ANSWERED_WINDOW = timedelta(hours=24)


def _as_date(value: date | datetime | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    return value


def _same_month_day(value: date, target: date) -> bool:
    return value.month == target.month and value.day == target.day


def birthday_matches(members: list[dict], today: date, days_before: int) -> list[dict]:
    target = today + timedelta(days=days_before)
    return [
        m for m in members
        if m.get("date_of_birth") and _same_month_day(_as_date(m["date_of_birth"]), target)
    ]


def anniversary_matches(members: list[dict], today: date, days_before: int) -> list[dict]:
    target = today + timedelta(days=days_before)
    matched = []
    for m in members:
        joined = _as_date(m["created_at"])
        if not _same_month_day(joined, target):
            continue
        years = today.year - joined.year
        if years >= 1:
            matched.append({**m, "years": years})
    return matched


def new_member_matches(members: list[dict], today: date, days_after: int) -> list[dict]:
    target = today - timedelta(days=days_after)
    return [m for m in members if _as_date(m["created_at"]) == target]


def inactive_matches(
    members: list[dict],
    last_activity: dict[str, datetime],
    recently_contacted: set[str],
    now: datetime,
    days_inactive: int,
) -> list[dict]:
    """last_activity: member_id -> newest activity timestamp (absent = never active)."""
    cutoff = ensure_utc(now) - timedelta(days=days_inactive)
    matched = []
    for m in members:
        member_id = str(m["id"])
        last = last_activity.get(member_id)
        if last is not None and ensure_utc(last) >= cutoff:
            continue
        if member_id in recently_contacted:
            continue
        matched.append(m)
    return matched


def answered_prayer_matches(prayers: list[dict], now: datetime) -> list[dict]:
    """prayers carry `answered_at` and a nested `member` dict."""
    since = ensure_utc(now) - ANSWERED_WINDOW
    matched = []
    for p in prayers:
        answered_at = p.get("answered_at")
        if p.get("member") and answered_at and ensure_utc(answered_at) >= since:
            matched.append(p["member"])
    return matched


def config_days(config: dict, key: str, default: int = 0) -> int:
    """Non-negative day count from a stored trigger config; digit strings are accepted."""
    raw = config.get(key)
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool):
        raise ValidationFailedError(f"{key} must be a whole number of days", key)
    try:
        days = int(raw)
    except (TypeError, ValueError):
        raise ValidationFailedError(f"{key} must be a whole number of days", key) from None
    if days < 0 or days != float(raw):
        raise ValidationFailedError(f"{key} must be a whole number of days", key)
    return days


def select_members(
    trigger_type: str,
    trigger_config: dict,
    *,
    now: datetime,
    members: list[dict],
    last_activity: dict[str, datetime] | None = None,
    recently_contacted: set[str] | None = None,
    answered_prayers: list[dict] | None = None,
) -> list[dict]:
    """Members a workflow should act on right now."""
    config = trigger_config or {}
    today = ensure_utc(now).date()
    match trigger_type:
        case WorkflowTrigger.BIRTHDAY.value:
            return birthday_matches(members, today, config_days(config, "days_before"))
        case WorkflowTrigger.ANNIVERSARY.value:
            return anniversary_matches(members, today, config_days(config, "days_before"))
        case WorkflowTrigger.NEW_MEMBER.value:
            return new_member_matches(members, today, config_days(config, "days_after"))
        case WorkflowTrigger.INACTIVE.value:
            return inactive_matches(
                members, last_activity or {}, recently_contacted or set(), now,
                config_days(config, "days_inactive", DEFAULT_DAYS_INACTIVE) or DEFAULT_DAYS_INACTIVE,
            )
        case WorkflowTrigger.PRAYER_ANSWERED.value:
            return answered_prayer_matches(answered_prayers or [], now)
        case _:
            return []


def render_template(template: str, member: dict) -> str:
    """Fill {first_name}, {last_name}, {email}, {years} placeholders."""
    years = member.get("years")
    return (
        (template or "")
        .replace("{first_name}", member.get("first_name") or "Friend")
        .replace("{last_name}", member.get("last_name") or "")
        .replace("{email}", member.get("email") or "")
        .replace("{years}", str(years) if years else "1")
    )


def text_to_html(body: str) -> str:
    return html.escape(body).replace("\n", "<br>")
