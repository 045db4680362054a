"""Gamification rules — points, streaks, badges, levels. Pure, no IO."""

from datetime import date

from ministry.core.gamification import (
    ACTION_POINTS, BADGES, DEFAULT_ACTION_POINTS, LEVELS,
    advance_streak, badge_points, describe_badge, leaderboard_position,
    level_for, level_progress, new_badges, points_for_action,
)

TODAY = date(2026, 3, 10)


# --- Points -------------------------------------------------------------------

def test_known_action_uses_table():
    assert points_for_action("testimony_shared") == ACTION_POINTS["testimony_shared"] == 25


def test_unknown_action_gets_default_points():
    assert points_for_action("dance_party") == DEFAULT_ACTION_POINTS


def test_custom_points_override_only_when_positive():
    assert points_for_action("check_in", 40) == 40
    assert points_for_action("check_in", 0) == ACTION_POINTS["check_in"]
    assert points_for_action("check_in", -3) == ACTION_POINTS["check_in"]


# --- Streaks ------------------------------------------------------------------

def test_first_activity_starts_streak():
    s = advance_streak(None, TODAY, 0, 0)
    assert (s.current, s.longest, s.last_activity) == (1, 1, TODAY)


def test_same_day_activity_leaves_streak_unchanged():
    s = advance_streak(TODAY, TODAY, 4, 9)
    assert (s.current, s.longest) == (4, 9)


def test_next_day_extends_streak_and_longest():
    s = advance_streak(date(2026, 3, 9), TODAY, 9, 9)
    assert (s.current, s.longest) == (10, 10)


def test_gap_resets_streak_but_keeps_longest():
    s = advance_streak(date(2026, 3, 1), TODAY, 12, 15)
    assert (s.current, s.longest) == (1, 15)


def test_longest_never_below_current():
    s = advance_streak(TODAY, TODAY, 5, 2)
    assert s.longest >= s.current


# --- Badges -------------------------------------------------------------------

def test_first_action_badge_unlocks_once():
    assert new_badges("prayer_submitted", 1, set()) == ["first_prayer"]
    assert new_badges("prayer_submitted", 1, {"first_prayer"}) == []


def test_streak_thresholds_unlock_every_reached_badge():
    unlocked = new_badges("check_in", 30, {"devotional_streak_7"})
    assert unlocked == ["devotional_streak_30"]


def test_badge_points_sum_catalogue_values():
    assert badge_points(["first_prayer", "devotional_streak_7"]) == 150
    assert badge_points(["not_a_badge"]) == 0


def test_describe_badge_includes_catalogue_fields():
    badge = describe_badge("first_devotional")
    assert badge["id"] == "first_devotional"
    assert badge["name"] == BADGES["first_devotional"]["name"]


# --- Levels -------------------------------------------------------------------

def test_level_boundaries():
    assert level_for(0)["name"] == "Seeker"
    assert level_for(499)["level"] == 1
    assert level_for(500)["name"] == "Believer"
    assert level_for(50_000)["name"] == "Elder"


def test_level_progress_mid_level():
    progress = level_progress(1000)
    assert progress["current"]["name"] == "Believer"
    assert progress["progress"] == {"current": 500, "required": 1000, "percentage": 50}


def test_level_progress_at_top_level_is_complete():
    top_points = LEVELS[-1][2]
    assert level_progress(top_points + 10)["progress"]["percentage"] == 100


def test_leaderboard_position_is_one_indexed():
    assert leaderboard_position("b", ["a", "b", "c"]) == 2
    assert leaderboard_position("z", ["a"]) == 0
