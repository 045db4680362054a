"""Volunteer Matching — availability maps, team stats, and auto-schedule ranking.

Invariants:
    - A member already scheduled for an event is never suggested for it again
    - gap_to_fill is never negative
    - Ranking is deterministic: score desc, then fewer confirmed schedules, then member id

Design Decisions:
    - Heuristic score (team membership, lead role) instead of an optimizer: the
      pool per event is tens of people and admins review every suggestion
"""

from collections import defaultdict

from ministry.core.dates import ensure_utc, weekday_name

DEFAULT_REQUIRED_COUNT = 5
DEFAULT_POSITIONS_NEEDED = 10
DEFAULT_POSITION = "General"
MAX_SUGGESTIONS = 20

TEAM_MEMBER_BONUS = 20
LEAD_ROLE_BONUS = 10


def availability_days(availability: list[dict]) -> dict[str, set[str]]:
    """member_id -> weekdays the member marked as available."""
    days: dict[str, set[str]] = defaultdict(set)
    for row in availability:
        if row.get("is_available", True):
            days[str(row["member_id"])].add(row["day_of_week"].lower())
    return dict(days)


def team_stats(
    teams: list[dict], schedules: list[dict], days: dict[str, set[str]],
) -> list[dict]:
    """teams carry a `members` list of {member_id, role, ...}."""
    stats = []
    for team in teams:
        members = team.get("members") or []
        stats.append({
            "id": str(team["id"]),
            "name": team["name"],
            "description": team.get("description"),
            "member_count": len(members),
            "required_count": team.get("required_count") or DEFAULT_REQUIRED_COUNT,
            "scheduled_confirmed": sum(
                1 for s in schedules
                if s.get("team_id") == team["id"] and s["status"] == "confirmed"
            ),
            "available_members": sum(
                1 for m in members if days.get(str(m["member_id"]))
            ),
        })
    return stats


def event_suggestions(
    event: dict,
    teams: list[dict],
    schedules: list[dict],
    days: dict[str, set[str]],
) -> dict:
    """Available, unscheduled team members for one upcoming event."""
    day = weekday_name(ensure_utc(event["start_date"]))
    event_schedules = [s for s in schedules if s["event_id"] == event["id"]]
    scheduled_ids = {str(s["member_id"]) for s in event_schedules}
    positions = event.get("volunteer_positions_needed") or DEFAULT_POSITIONS_NEEDED

    available = []
    for team in teams:
        for m in team.get("members") or []:
            member_id = str(m["member_id"])
            if day in days.get(member_id, set()) and member_id not in scheduled_ids:
                available.append({
                    "member_id": member_id,
                    "member_name": m.get("name"),
                    "team_id": str(team["id"]),
                    "team_name": team["name"],
                    "role": m.get("role"),
                })

    return {
        "event": {
            "id": str(event["id"]),
            "title": event["title"],
            "date": ensure_utc(event["start_date"]).isoformat(),
            "location": event.get("location"),
            "positions_needed": positions,
        },
        "day_of_week": day,
        "available_volunteers": available[:MAX_SUGGESTIONS],
        "currently_scheduled": len(event_schedules),
        "gap_to_fill": max(0, positions - len(event_schedules)),
    }


def candidate_score(is_team_member: bool, role: str | None) -> int:
    score = 0
    if is_team_member:
        score += TEAM_MEMBER_BONUS
    if (role or "").lower() == "lead":
        score += LEAD_ROLE_BONUS
    return score


def rank_candidates(
    available_ids: list[str],
    already_scheduled: set[str],
    team_roles: dict[str, str | None],
    confirmed_counts: dict[str, int],
    slots: int,
) -> list[str]:
    """Pick up to `slots` members for auto-scheduling.

    team_roles maps member_id -> role for members on any volunteer team.
    """
    if slots <= 0:
        return []
    candidates = {m for m in available_ids if m not in already_scheduled}
    ranked = sorted(
        candidates,
        key=lambda m: (
            -candidate_score(m in team_roles, team_roles.get(m)),
            confirmed_counts.get(m, 0),
            m,
        ),
    )
    return ranked[:slots]
