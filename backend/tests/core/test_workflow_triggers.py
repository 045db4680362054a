"""Workflow triggers — member selection per trigger type and template rendering."""

from datetime import date, datetime, timedelta, timezone

import pytest

from ministry.core.errors import ValidationFailedError
from ministry.core.workflow_triggers import (
    config_days, render_template, select_members, text_to_html,
)

NOW = datetime(2026, 4, 20, 9, tzinfo=timezone.utc)


def _member(mid, **kw):
    base = {
        "id": mid, "first_name": "Sam", "last_name": "Lee", "email": f"{mid}@x.org",
        "date_of_birth": None, "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
    }
    return {**base, **kw}


def test_birthday_today_and_with_lead_time():
    members = [
        _member("a", date_of_birth=date(1990, 4, 20)),
        _member("b", date_of_birth=date(1985, 4, 23)),
        _member("c"),
    ]
    assert [m["id"] for m in select_members("birthday", {}, now=NOW, members=members)] == ["a"]
    ahead = select_members("birthday", {"days_before": 3}, now=NOW, members=members)
    assert [m["id"] for m in ahead] == ["b"]


def test_anniversary_requires_full_year_and_sets_years():
    members = [
        _member("old", created_at=datetime(2023, 4, 20, tzinfo=timezone.utc)),
        _member("new", created_at=datetime(2026, 4, 20, tzinfo=timezone.utc)),
    ]
    matched = select_members("anniversary", {}, now=NOW, members=members)
    assert [(m["id"], m["years"]) for m in matched] == [("old", 3)]


def test_new_member_matches_exact_join_day():
    members = [
        _member("a", created_at=NOW - timedelta(days=7)),
        _member("b", created_at=NOW - timedelta(days=6)),
    ]
    matched = select_members("new_member", {"days_after": 7}, now=NOW, members=members)
    assert [m["id"] for m in matched] == ["a"]


def test_inactive_skips_recent_activity_and_cooldown():
    members = [_member("active"), _member("idle"), _member("never"), _member("contacted")]
    last_activity = {
        "active": NOW - timedelta(days=2),
        "idle": NOW - timedelta(days=45),
        "contacted": NOW - timedelta(days=90),
    }
    matched = select_members(
        "inactive", {"days_inactive": 30}, now=NOW, members=members,
        last_activity=last_activity, recently_contacted={"contacted"},
    )
    assert [m["id"] for m in matched] == ["idle", "never"]


def test_inactive_default_threshold_is_thirty_days():
    members = [_member("a")]
    matched = select_members(
        "inactive", {}, now=NOW, members=members,
        last_activity={"a": NOW - timedelta(days=29)},
    )
    assert matched == []


def test_prayer_answered_within_24_hours():
    owner = _member("p")
    prayers = [
        {"answered_at": NOW - timedelta(hours=2), "member": owner},
        {"answered_at": NOW - timedelta(hours=30), "member": _member("late")},
        {"answered_at": NOW - timedelta(hours=1), "member": None},
    ]
    matched = select_members("prayer_answered", {}, now=NOW, members=[], answered_prayers=prayers)
    assert matched == [owner]


def test_unknown_trigger_matches_nobody():
    assert select_members("full_moon", {}, now=NOW, members=[_member("a")]) == []


def test_render_template_fills_placeholders():
    text = render_template("Happy {years} years, {first_name} {last_name}!", {
        "first_name": "Ada", "last_name": "Ng", "years": 2,
    })
    assert text == "Happy 2 years, Ada Ng!"


def test_render_template_defaults_and_stray_braces():
    assert render_template("Hi {first_name} {unknown} {years}", {}) == "Hi Friend {unknown} 1"


def test_text_to_html_escapes_and_breaks_lines():
    assert text_to_html("a < b\nc") == "a &lt; b<br>c"


@pytest.mark.parametrize("config,expected", [
    ({}, 0),
    ({"days_before": 3}, 3),
    ({"days_before": "3"}, 3),
    ({"days_before": None}, 0),
])
def test_config_days_accepts_whole_numbers(config, expected):
    assert config_days(config, "days_before") == expected


@pytest.mark.parametrize("raw", ["soon", -2, 1.5, True, [3]])
def test_config_days_rejects_anything_else(raw):
    with pytest.raises(ValidationFailedError):
        config_days({"days_before": raw}, "days_before")


def test_bad_stored_config_raises_instead_of_crashing():
    with pytest.raises(ValidationFailedError):
        select_members("birthday", {"days_before": "soon"}, now=NOW, members=[_member("a")])
