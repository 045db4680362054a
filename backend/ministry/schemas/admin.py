"""Admin Schemas — live viewer, volunteer scheduler, workflows, campaigns, SMS.

Invariants:
    - WorkflowCreate.trigger_type/action_type validate against domain enums
    - Trigger day offsets are integers: a bad value is a 400 at save time, not a cron crash
    - SmsBulk carries 1-100 recipients
    - CampaignCreate.target_audience.type is one of all|tiers|subscription_type|member_ids

Design Decisions:
    - Volunteer scheduler takes a single `action` discriminator body: mirrors the
      one-endpoint-many-actions contract the admin UI posts to
    - Action-specific required fields are checked in the service so the error
      message names the missing field (400 ValidationFailedError)
"""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from ministry.core.domain_types import Tier, WorkflowAction, WorkflowTrigger


# --- Live service -------------------------------------------------------------

class LiveAction(BaseModel):
    service_id: UUID
    action: str


# --- Volunteer scheduler ------------------------------------------------------

class SchedulerAction(BaseModel):
    action: str
    event_id: UUID | None = None
    member_id: UUID | None = None
    team_id: UUID | None = None
    position: str | None = Field(None, max_length=100)


# --- Workflows ----------------------------------------------------------------

class TriggerConfig(BaseModel):
    """Day offsets a trigger reads; keys a trigger does not use are ignored."""
    days_before: int | None = Field(None, ge=0, le=365)
    days_after: int | None = Field(None, ge=0, le=365)
    days_inactive: int | None = Field(None, ge=1, le=3650)


class WorkflowCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    trigger_type: WorkflowTrigger
    trigger_config: TriggerConfig = Field(default_factory=TriggerConfig)
    action_type: WorkflowAction
    action_config: dict = Field(default_factory=dict)
    is_active: bool = True


class WorkflowUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    trigger_config: TriggerConfig | None = None
    action_config: dict | None = None
    is_active: bool | None = None


# --- Email campaigns ----------------------------------------------------------

class CampaignContent(BaseModel):
    body: str = Field("", max_length=50_000)
    cta_text: str | None = Field(None, max_length=200)
    cta_url: str | None = Field(None, max_length=1000)


class TargetAudience(BaseModel):
    type: Literal["all", "tiers", "subscription_type", "member_ids"] = "all"
    tiers: list[Tier] = Field(default_factory=list)
    subscription_type: str | None = None
    member_ids: list[UUID] = Field(default_factory=list)


class CampaignCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    subject: str = Field(min_length=1, max_length=300)
    content: CampaignContent = Field(default_factory=CampaignContent)
    html: str | None = None
    target_audience: TargetAudience = Field(default_factory=TargetAudience)


class CampaignSend(BaseModel):
    test_email: EmailStr | None = None


class CampaignDraftRequest(BaseModel):
    topic: str = Field(min_length=1, max_length=1000)
    tone: str = Field("warm", max_length=50)
    audience: str | None = Field(None, max_length=200)


# --- SMS ----------------------------------------------------------------------

class SmsTest(BaseModel):
    to: str = Field(min_length=1, max_length=32)
    message: str = Field(min_length=1, max_length=1600)


class SmsBulk(BaseModel):
    recipients: list[str] = Field(min_length=1, max_length=100)
    message: str = Field(min_length=1, max_length=1600)
