"""Member Schemas — portal settings, activity, gamification, progress, and admin edits.

Invariants:
    - MemberSettingsUpdate only carries fields a member may change about themselves
    - Role/tier updates validate against the Role/Tier enums
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from ministry.core.domain_types import Role, Tier


class SubscriptionToggles(BaseModel):
    weekly_newsletter: bool | None = None
    announcements: bool | None = None


class MemberSettingsUpdate(BaseModel):
    """Partial update — omitted fields are left untouched."""
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=32)
    bio: str | None = Field(None, max_length=2000)
    location: str | None = Field(None, max_length=200)
    date_of_birth: date | None = None
    email_subscriptions: SubscriptionToggles | None = None


class SeasonJoin(BaseModel):
    season_id: UUID


class ActivityCreate(BaseModel):
    activity_type: str = Field(min_length=1, max_length=50)
    resource_type: str | None = Field(None, max_length=50)
    resource_id: str | None = Field(None, max_length=100)
    resource_name: str | None = Field(None, max_length=300)
    details: dict | None = None


class GamificationAction(BaseModel):
    """Points award — explicit positive `points` overrides the action table."""
    action: str = Field(min_length=1, max_length=50)
    points: int | None = None


class TeachingProgressUpdate(BaseModel):
    teaching_id: UUID
    progress_seconds: int = Field(0, ge=0)
    completed: bool = False


class RoleUpdate(BaseModel):
    role: Role


class TierUpdate(BaseModel):
    tier: Tier
