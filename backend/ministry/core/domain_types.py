"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - MemberId, ContentId wrap UUIDs — never use bare UUID in domain logic
    - All valid states encoded as Enums — no raw string matching in core/
    - Role and Tier are separate ladders: role gates the back-office, tier gates content

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders and compare equal to DB strings
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

MemberId = NewType("MemberId", UUID)
ContentId = NewType("ContentId", UUID)
WorkflowId = NewType("WorkflowId", UUID)


# ─── Access ──────────────────────────────────────────────────────

class Role(str, Enum):
    """Back-office role ladder, lowest first."""
    FREE = "free"
    MEMBER = "member"
    PARTNER = "partner"
    STAFF = "staff"
    ADMIN = "admin"


class Tier(str, Enum):
    """Membership tier ladder, lowest first. Governs content access."""
    FREE = "free"
    PARTNER = "partner"
    COVENANT = "covenant"


# ─── Activity ────────────────────────────────────────────────────

class ActivityType(str, Enum):
    """Member activity kinds recorded in member_activity."""
    TEACHING_VIEWED = "teaching_viewed"
    CONTENT_VIEW = "content_view"
    DEVOTIONAL_READ = "devotional_read"
    PROPHECY_VIEWED = "prophecy_viewed"
    PRAYER_SUBMITTED = "prayer_submitted"
    TESTIMONY_SHARED = "testimony_shared"
    JOURNAL_ENTRY = "journal_entry"
    AI_CHAT = "ai_chat"
    GROUP_ACTIVITY = "group_activity"
    COURSE_PROGRESS = "course_progress"
    CHECK_IN = "check_in"


CONTENT_ACTIVITY_TYPES: frozenset[str] = frozenset({
    ActivityType.TEACHING_VIEWED.value,
    ActivityType.CONTENT_VIEW.value,
    ActivityType.DEVOTIONAL_READ.value,
    ActivityType.PROPHECY_VIEWED.value,
})


# ─── Prayer ──────────────────────────────────────────────────────

class PrayerStatus(str, Enum):
    """Prayer request moderation states."""
    PENDING = "pending"
    ACTIVE = "active"
    ARCHIVED = "archived"


class PrayerCategory(str, Enum):
    HEALTH = "health"
    FAMILY = "family"
    FINANCIAL = "financial"
    SPIRITUAL = "spiritual"
    OTHER = "other"


# ─── Communications ──────────────────────────────────────────────

class CampaignStatus(str, Enum):
    """Email campaign lifecycle: draft -> sending -> sent | failed."""
    DRAFT = "draft"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class DeliveryStatus(str, Enum):
    """Per-recipient outcome for email/SMS/workflow sends."""
    SENT = "sent"
    FAILED = "failed"


class SubscriptionType(str, Enum):
    WEEKLY_NEWSLETTER = "weekly_newsletter"
    ANNOUNCEMENTS = "announcements"


# ─── Workflows ───────────────────────────────────────────────────

class WorkflowTrigger(str, Enum):
    """What selects members for a workflow run."""
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"
    NEW_MEMBER = "new_member"
    INACTIVE = "inactive"
    PRAYER_ANSWERED = "prayer_answered"


class WorkflowAction(str, Enum):
    """What a workflow does for each matched member."""
    EMAIL = "email"
    NOTIFICATION = "notification"
    SMS = "sms"


# ─── Volunteers & Live ───────────────────────────────────────────

class ScheduleStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class LiveServiceStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    ENDED = "ended"


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
