"""Domain Types — verifies enum ladders and value strings.

Tests:
    - Role and Tier are separate ladders with the documented order
    - str Enums compare equal to their DB strings
    - Content activity set covers only content kinds
"""

from uuid import uuid4

from ministry.core.domain_types import (
    CONTENT_ACTIVITY_TYPES, ActivityType, CampaignStatus, MemberId,
    PrayerStatus, Role, Tier, WorkflowAction, WorkflowTrigger,
)


def test_identity_types_wrap_uuid():
    uid = uuid4()
    assert MemberId(uid) == uid


def test_role_ladder_order():
    assert [r.value for r in Role] == ["free", "member", "partner", "staff", "admin"]


def test_tier_ladder_order():
    assert [t.value for t in Tier] == ["free", "partner", "covenant"]


def test_str_enums_compare_to_db_strings():
    assert Role.ADMIN == "admin"
    assert PrayerStatus.PENDING == "pending"


def test_campaign_status_lifecycle():
    assert {s.value for s in CampaignStatus} == {"draft", "sending", "sent", "failed"}


def test_workflow_vocabulary():
    assert {t.value for t in WorkflowTrigger} == {
        "birthday", "anniversary", "new_member", "inactive", "prayer_answered",
    }
    assert {a.value for a in WorkflowAction} == {"email", "notification", "sms"}


def test_content_activity_types_exclude_social_kinds():
    assert ActivityType.TEACHING_VIEWED.value in CONTENT_ACTIVITY_TYPES
    assert ActivityType.AI_CHAT.value not in CONTENT_ACTIVITY_TYPES
    assert ActivityType.PRAYER_SUBMITTED.value not in CONTENT_ACTIVITY_TYPES
