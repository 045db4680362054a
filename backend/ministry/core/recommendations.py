"""Recommendations — additive match scoring for groups, events, and teachings.

Invariants:
    - Every score starts at BASE_SCORE and is capped at 100
    - Items the member already joined/registered/viewed are filtered out by the caller
    - Ranking is stable: equal scores keep their input order

Design Decisions:
    - Keyword tables over embeddings: gifts and seasons are a closed vocabulary
    - Match reasons keyed by score band so the UI copy stays consistent per kind
"""

from datetime import datetime

from ministry.core.dates import ensure_utc

BASE_SCORE = 50
TOP_GROUPS = 5
TOP_EVENTS = 5
TOP_TEACHINGS = 6
TOP_PROPHECIES = 3

GIFT_GROUP_CATEGORIES: dict[str, tuple[str, ...]] = {
    "prophecy": ("prophetic", "intercessory", "worship"),
    "teaching": ("bible study", "discipleship", "theology"),
    "encouragement": ("support", "fellowship", "mentoring"),
    "giving": ("missions", "outreach", "service"),
    "leadership": ("leadership", "ministry", "evangelism"),
    "mercy": ("pastoral care", "counseling", "support"),
    "service": ("service", "hospitality", "outreach"),
}

GIFT_EVENT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "prophecy": ("prophetic", "worship", "prayer", "encounter"),
    "teaching": ("conference", "seminar", "training", "bible"),
    "encouragement": ("fellowship", "celebration", "gathering"),
    "giving": ("missions", "outreach", "service"),
    "leadership": ("leadership", "conference", "summit"),
    "mercy": ("healing", "restoration", "care"),
}

SEASON_GROUP_KEYWORDS: dict[str, tuple[str, ...]] = {
    "preparation": ("foundation", "basics", "new believers"),
    "growth": ("discipleship", "growth", "training"),
    "harvest": ("evangelism", "outreach", "missions"),
    "rest": ("fellowship", "support", "prayer"),
}

# kind -> (above 70, above 50, otherwise)
MATCH_REASONS: dict[str, tuple[str, str, str]] = {
    "group": (
        "Great match for your spiritual journey!",
        "Could complement your growth",
        "Explore something new",
    ),
    "event": (
        "Highly recommended for you!",
        "Aligned with your interests",
        "New experience awaits",
    ),
    "teaching": (
        "Perfect for your journey!",
        "Recommended for you",
        "Expand your knowledge",
    ),
}


def match_reason(kind: str, score: int) -> str:
    high, mid, low = MATCH_REASONS[kind]
    if score > 70:
        return high
    if score > 50:
        return mid
    return low


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def score_group(group: dict, gift: str | None, season: str | None) -> int:
    score = BASE_SCORE
    category = (group.get("category") or "").lower()
    name = (group.get("name") or "").lower()
    if _contains_any(category, GIFT_GROUP_CATEGORIES.get((gift or "").lower(), ())):
        score += 30
    season_keywords = SEASON_GROUP_KEYWORDS.get((season or "").lower(), ())
    if _contains_any(category, season_keywords) or _contains_any(name, season_keywords):
        score += 20
    return min(100, score)


def score_event(event: dict, gift: str | None, now: datetime) -> tuple[int, int]:
    """(score, days_until) for an upcoming event."""
    score = BASE_SCORE
    haystack = " ".join(
        (event.get("event_type") or "", event.get("title") or ""),
    ).lower()
    if _contains_any(haystack, GIFT_EVENT_KEYWORDS.get((gift or "").lower(), ())):
        score += 30
    days_until = int(
        (ensure_utc(event["start_date"]) - ensure_utc(now)).total_seconds() // 86_400
    )
    if days_until <= 14:
        score += 15
    if days_until <= 7:
        score += 10
    return min(100, score), days_until


def score_teaching(teaching: dict, gift: str | None, season: str | None) -> int:
    score = BASE_SCORE
    category = (teaching.get("category") or "").lower()
    if gift and gift.lower() in category:
        score += 30
    if season and season.lower() in category:
        score += 20
    views = teaching.get("views") or 0
    if views > 100:
        score += 10
    if views > 500:
        score += 10
    return min(100, score)


def _ranked(items: list[dict], limit: int) -> list[dict]:
    return sorted(items, key=lambda i: i["match_score"], reverse=True)[:limit]


def rank_groups(groups: list[dict], gift: str | None, season: str | None) -> list[dict]:
    scored = []
    for g in groups:
        score = score_group(g, gift, season)
        scored.append({
            **g, "match_score": score, "match_reason": match_reason("group", score),
        })
    return _ranked(scored, TOP_GROUPS)


def rank_events(events: list[dict], gift: str | None, now: datetime) -> list[dict]:
    scored = []
    for e in events:
        score, days_until = score_event(e, gift, now)
        scored.append({
            **e,
            "match_score": score,
            "days_until": days_until,
            "match_reason": match_reason("event", score),
        })
    return _ranked(scored, TOP_EVENTS)


def rank_teachings(
    teachings: list[dict], gift: str | None, season: str | None,
) -> list[dict]:
    scored = []
    for t in teachings:
        score = score_teaching(t, gift, season)
        scored.append({
            **t, "match_score": score, "match_reason": match_reason("teaching", score),
        })
    return _ranked(scored, TOP_TEACHINGS)


def summary_prompt(
    first_name: str | None, gift: str | None, season: str | None,
    recommendations: dict,
) -> str:
    groups = recommendations.get("groups") or []
    events = recommendations.get("events") or []
    return (
        f"Member: {first_name or 'Friend'}\n"
        f"Gift: {gift or 'discovering'}\n"
        f"Season: {season or 'growth'}\n"
        f"Top group match: {groups[0]['name'] if groups else 'exploring options'}\n"
        f"Top event: {events[0]['title'] if events else 'upcoming events'}\n\n"
        "Generate a personalized summary of what they should focus on this week."
    )
