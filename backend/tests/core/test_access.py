"""Access rules — role ladder, tier gating, and partner tier table."""

import pytest

from ministry.core.access import (
    PARTNER_TIERS, TIER_MONTHLY_AMOUNT,
    add_access_info, assignable_roles, can_change_role, can_access_tier, has_minimum_role,
    is_admin, is_staff_or_above, normalize_tier, role_level, upgrade_message,
)
from ministry.core.domain_types import Role


# --- Roles --------------------------------------------------------------------

def test_role_levels_follow_ladder_order():
    levels = [role_level(r) for r in ("free", "member", "partner", "staff", "admin")]
    assert levels == [0, 1, 2, 3, 4]


def test_unknown_role_is_lowest_rung():
    assert role_level("bishop") == 0


def test_missing_role_only_satisfies_free():
    assert has_minimum_role(None, Role.FREE)
    assert not has_minimum_role(None, Role.MEMBER)
    assert not has_minimum_role("", Role.MEMBER)


@pytest.mark.parametrize("role,expected", [
    ("staff", True), ("admin", True), ("partner", False), ("member", False), (None, False),
])
def test_is_staff_or_above(role, expected):
    assert is_staff_or_above(role) is expected


def test_only_admin_is_admin():
    assert is_admin("admin")
    assert not is_admin("staff")


def test_staff_cannot_assign_staff_or_admin():
    assert assignable_roles("staff") == ["free", "member", "partner"]


def test_admin_can_assign_every_role():
    assert assignable_roles("admin") == ["free", "member", "partner", "staff", "admin"]


def test_members_cannot_assign_roles():
    assert assignable_roles("member") == []


@pytest.mark.parametrize("assigner,current,new,allowed", [
    ("staff", "member", "partner", True),
    ("staff", "partner", "free", True),
    ("staff", "admin", "free", False),
    ("staff", "staff", "member", False),
    ("staff", "member", "staff", False),
    ("admin", "admin", "free", True),
    ("member", "free", "member", False),
])
def test_can_change_role_checks_current_and_new(assigner, current, new, allowed):
    assert can_change_role(assigner, current, new) is allowed


# --- Tiers --------------------------------------------------------------------

def test_normalize_tier_maps_unknown_to_free():
    assert normalize_tier("gold") == "free"
    assert normalize_tier(None) == "free"
    assert normalize_tier("covenant") == "covenant"


def test_tier_gating_compares_ladder_positions():
    assert can_access_tier("covenant", "partner")
    assert can_access_tier("partner", "partner")
    assert not can_access_tier("free", "partner")
    assert not can_access_tier("partner", "covenant")


def test_unknown_content_tier_is_free_for_everyone():
    assert can_access_tier(None, "mystery")


def test_staff_bypass_tier_gating():
    assert can_access_tier("free", "covenant", role="staff")
    assert can_access_tier("free", "covenant", role="admin")
    assert not can_access_tier("free", "covenant", role="partner")


def test_add_access_info_normalizes_and_does_not_mutate_input():
    items = [{"id": 1, "tier_required": "covenant"}, {"id": 2, "tier_required": None}]
    annotated = add_access_info(items, "partner")
    assert annotated[0]["has_access"] is False
    assert annotated[1] == {"id": 2, "tier_required": "free", "has_access": True}
    assert "has_access" not in items[0]


def test_upgrade_message_names_required_tier():
    assert "Covenant Partner" in upgrade_message("covenant")
    assert "Partner" in upgrade_message("partner")
    assert upgrade_message("free") == "Sign up to access this content."


def test_partner_tier_amounts_match_lookup():
    assert [t["slug"] for t in PARTNER_TIERS] == ["free", "partner", "covenant"]
    assert TIER_MONTHLY_AMOUNT == {"free": 0, "partner": 50, "covenant": 150}
