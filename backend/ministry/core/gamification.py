"""Gamification Rules — points, streaks, badges, and levels for member engagement.

Invariants:
    - Pure: every function takes plain values and returns plain values
    - A badge is never awarded twice (earned set is checked before awarding)
    - Streak: same-day activity leaves it unchanged, next-day activity extends it,
      any longer gap resets it to 1
    - longest_streak >= current_streak after every advance

Design Decisions:
    - BADGES and LEVELS as module constants: the catalogue is product copy, not data
    - Unknown actions earn DEFAULT_ACTION_POINTS instead of failing: clients add
      new activity kinds faster than the table is updated
"""

from dataclasses import dataclass
from datetime import date, timedelta

BADGES: dict[str, dict] = {
    # Devotional
    "first_devotional": {"name": "First Light", "description": "Read your first devotional", "category": "devotional", "points": 50},
    "devotional_streak_7": {"name": "Week Warrior", "description": "7-day devotional streak", "category": "devotional", "points": 100},
    "devotional_streak_30": {"name": "Monthly Maven", "description": "30-day devotional streak", "category": "devotional", "points": 500},
    "devotional_streak_100": {"name": "Century Champion", "description": "100-day devotional streak", "category": "devotional", "points": 1000},
    # Prayer
    "first_prayer": {"name": "Prayer Warrior", "description": "Submit your first prayer request", "category": "prayer", "points": 50},
    "prayer_answered": {"name": "Testimony Builder", "description": "First answered prayer", "category": "prayer", "points": 100},
    "prayer_intercessor": {"name": "Intercessor", "description": "Pray for 10 others", "category": "prayer", "points": 200},
    # Learning
    "first_teaching": {"name": "Eager Learner", "description": "Watch your first teaching", "category": "learning", "points": 50},
    "teaching_complete_10": {"name": "Knowledge Seeker", "description": "Complete 10 teachings", "category": "learning", "points": 300},
    "course_complete": {"name": "Graduate", "description": "Complete a course", "category": "learning", "points": 500},
    # Community
    "first_testimony": {"name": "Voice of Victory", "description": "Share your first testimony", "category": "community", "points": 100},
    "group_joiner": {"name": "Community Builder", "description": "Join a community group", "category": "community", "points": 75},
    "encourager": {"name": "Encourager", "description": "Encourage 5 members", "category": "community", "points": 150},
    # Journey
    "profile_complete": {"name": "Identity Known", "description": "Complete spiritual profile", "category": "journey", "points": 100},
    "gift_discovered": {"name": "Gift Discovered", "description": "Discover your spiritual gift", "category": "journey", "points": 150},
    "season_identified": {"name": "Season Seeker", "description": "Identify your current season", "category": "journey", "points": 100},
    # Giving
    "first_gift": {"name": "Generous Heart", "description": "Make your first donation", "category": "giving", "points": 100},
    "partner": {"name": "Partner", "description": "Become a ministry partner", "category": "giving", "points": 500},
    "covenant_partner": {"name": "Covenant Partner", "description": "Become a covenant partner", "category": "giving", "points": 1000},
    # Special
    "early_adopter": {"name": "Early Adopter", "description": "Joined in the first year", "category": "special", "points": 200},
    "anniversary_1": {"name": "One Year Strong", "description": "1 year membership", "category": "special", "points": 300},
    "anniversary_3": {"name": "Faithful Friend", "description": "3 years membership", "category": "special", "points": 500},
}

# (level, name, min_points), ascending
LEVELS: tuple[tuple[int, str, int], ...] = (
    (1, "Seeker", 0),
    (2, "Believer", 500),
    (3, "Disciple", 1500),
    (4, "Minister", 3000),
    (5, "Prophet", 5000),
    (6, "Apostle", 7500),
    (7, "Elder", 10_000),
)

ACTION_POINTS: dict[str, int] = {
    "devotional_read": 10,
    "teaching_viewed": 15,
    "prayer_submitted": 10,
    "testimony_shared": 25,
    "journal_entry": 10,
    "ai_chat": 5,
    "group_activity": 15,
    "course_progress": 20,
    "check_in": 5,
    "prophecy_viewed": 10,
}
DEFAULT_ACTION_POINTS = 5

STREAK_BADGES: tuple[tuple[int, str], ...] = (
    (7, "devotional_streak_7"),
    (30, "devotional_streak_30"),
    (100, "devotional_streak_100"),
)

FIRST_ACTION_BADGES: dict[str, str] = {
    "devotional_read": "first_devotional",
    "prayer_submitted": "first_prayer",
    "teaching_viewed": "first_teaching",
    "testimony_shared": "first_testimony",
}


@dataclass(frozen=True)
class StreakUpdate:
    current: int
    longest: int
    last_activity: date


def points_for_action(action: str, custom_points: int | None = None) -> int:
    if custom_points and custom_points > 0:
        return custom_points
    return ACTION_POINTS.get(action, DEFAULT_ACTION_POINTS)


def advance_streak(
    last_activity: date | None, today: date, current: int, longest: int,
) -> StreakUpdate:
    """Apply one day's activity to a streak."""
    if last_activity is None:
        return StreakUpdate(1, max(longest, 1), today)
    if last_activity == today:
        return StreakUpdate(current, max(longest, current), today)
    if last_activity == today - timedelta(days=1):
        extended = current + 1
        return StreakUpdate(extended, max(longest, extended), today)
    return StreakUpdate(1, max(longest, 1), today)


def new_badges(action: str, current_streak: int, earned: set[str]) -> list[str]:
    """Badge ids unlocked by this action that the member does not hold yet."""
    unlocked = [
        badge_id for threshold, badge_id in STREAK_BADGES
        if current_streak >= threshold
    ]
    first = FIRST_ACTION_BADGES.get(action)
    if first:
        unlocked.append(first)
    return [b for b in unlocked if b not in earned]


def badge_points(badge_ids: list[str]) -> int:
    return sum(BADGES.get(b, {}).get("points", 0) for b in badge_ids)


def describe_badge(badge_id: str) -> dict:
    return {"id": badge_id, **BADGES.get(badge_id, {})}


def level_for(points: int) -> dict:
    current = LEVELS[0]
    for entry in LEVELS:
        if points >= entry[2]:
            current = entry
    level, name, min_points = current
    return {"level": level, "name": name, "min_points": min_points}


def level_progress(points: int) -> dict:
    """Current level plus progress toward the next one."""
    current = level_for(points)
    following = [entry for entry in LEVELS if entry[0] == current["level"] + 1]
    if not following:
        progress = {"current": points, "required": 0, "percentage": 100}
    else:
        span = following[0][2] - current["min_points"]
        into = points - current["min_points"]
        progress = {
            "current": into,
            "required": span,
            "percentage": round(into / span * 100),
        }
    return {"current": current, "progress": progress}


def leaderboard_position(member_id, ranked_ids: list) -> int:
    """1-indexed position in ranked_ids; 0 when absent."""
    try:
        return ranked_ids.index(member_id) + 1
    except ValueError:
        return 0
