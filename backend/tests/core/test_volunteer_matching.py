"""Volunteer matching — availability, team stats, event gaps, auto-schedule ranking."""

from datetime import datetime, timezone

from ministry.core.volunteer_matching import (
    availability_days, candidate_score, event_suggestions, rank_candidates, team_stats,
)

# 2026-06-07 is a Sunday
SUNDAY_EVENT = {
    "id": "e1", "title": "Sunday Service",
    "start_date": datetime(2026, 6, 7, 10, tzinfo=timezone.utc),
    "location": "Main Hall", "volunteer_positions_needed": 3,
}
TEAM = {
    "id": "t1", "name": "Worship", "required_count": None,
    "members": [
        {"member_id": "m1", "role": "lead", "name": "Ana"},
        {"member_id": "m2", "role": None, "name": "Ben"},
        {"member_id": "m3", "role": None, "name": "Cy"},
    ],
}


def test_availability_days_ignores_unavailable_rows():
    days = availability_days([
        {"member_id": "m1", "day_of_week": "Sunday"},
        {"member_id": "m1", "day_of_week": "monday", "is_available": False},
        {"member_id": "m2", "day_of_week": "sunday", "is_available": True},
    ])
    assert days == {"m1": {"sunday"}, "m2": {"sunday"}}


def test_team_stats_defaults_required_count():
    schedules = [
        {"team_id": "t1", "status": "confirmed", "event_id": "e1", "member_id": "m1"},
        {"team_id": "t1", "status": "pending", "event_id": "e1", "member_id": "m2"},
    ]
    stats = team_stats([TEAM], schedules, {"m1": {"sunday"}})
    assert stats[0]["required_count"] == 5
    assert stats[0]["member_count"] == 3
    assert stats[0]["scheduled_confirmed"] == 1
    assert stats[0]["available_members"] == 1


def test_event_suggestions_skip_scheduled_and_unavailable_members():
    days = {"m1": {"sunday"}, "m2": {"sunday"}, "m3": {"saturday"}}
    schedules = [{"event_id": "e1", "member_id": "m1", "team_id": "t1", "status": "pending"}]
    result = event_suggestions(SUNDAY_EVENT, [TEAM], schedules, days)
    assert result["day_of_week"] == "sunday"
    assert [v["member_id"] for v in result["available_volunteers"]] == ["m2"]
    assert result["currently_scheduled"] == 1
    assert result["gap_to_fill"] == 2


def test_gap_to_fill_never_negative():
    schedules = [
        {"event_id": "e1", "member_id": f"x{i}", "team_id": None, "status": "confirmed"}
        for i in range(5)
    ]
    assert event_suggestions(SUNDAY_EVENT, [], schedules, {})["gap_to_fill"] == 0


def test_candidate_score_rewards_team_and_lead():
    assert candidate_score(False, None) == 0
    assert candidate_score(True, None) == 20
    assert candidate_score(True, "Lead") == 30


def test_rank_candidates_orders_by_score_then_load_then_id():
    ranked = rank_candidates(
        available_ids=["m9", "m2", "m1", "m3"],
        already_scheduled={"m3"},
        team_roles={"m1": None, "m2": "lead"},
        confirmed_counts={"m1": 4},
        slots=3,
    )
    assert ranked == ["m2", "m1", "m9"]


def test_rank_candidates_respects_slot_count():
    assert rank_candidates(["a", "b"], set(), {}, {}, 0) == []
    assert rank_candidates(["b", "a"], set(), {}, {}, 1) == ["a"]
