"""Initial schema — members, content, prayer, events, volunteers, messaging, workflows, AI.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", UUID(as_uuid=True), primary_key=True)


def _member_fk(name: str = "member_id", ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(
        name, UUID(as_uuid=True),
        sa.ForeignKey("members.id", ondelete=ondelete), nullable=nullable,
    )


def _timestamp(name: str = "created_at", nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    # ─── Members ─────────────────────────────────────────────────
    op.create_table(
        "members",
        _id(),
        sa.Column("user_id", sa.String(64), nullable=False, unique=True, index=True),
        sa.Column("email", sa.String(320), nullable=False, index=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("tier", sa.String(20), nullable=False, server_default="free"),
        _timestamp(),
        _timestamp("updated_at"),
    )
    op.create_table(
        "member_spiritual_profiles",
        _id(),
        sa.Column(
            "member_id", UUID(as_uuid=True),
            sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column("primary_gift", sa.String(50), nullable=True),
        sa.Column("secondary_gifts", sa.JSON, nullable=False),
        sa.Column("current_season", sa.String(50), nullable=True),
        sa.Column("total_devotionals_read", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_journal_entries", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_prayers_submitted", sa.Integer, nullable=False, server_default="0"),
        sa.Column("growth_areas", sa.JSON, nullable=False),
        sa.Column("strengths", sa.JSON, nullable=False),
    )
    op.create_table(
        "email_subscriptions",
        _id(),
        _member_fk(),
        sa.Column("subscription_type", sa.String(40), nullable=False),
        sa.Column("is_subscribed", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("member_id", "subscription_type"),
    )
    op.create_table(
        "member_activity",
        _id(),
        _member_fk(),
        sa.Column("activity_type", sa.String(40), nullable=False),
        sa.Column("resource_type", sa.String(40), nullable=True),
        sa.Column("resource_id", sa.String(64), nullable=True),
        sa.Column("resource_name", sa.String(300), nullable=True),
        sa.Column("metadata", sa.JSON, nullable=True),
        _timestamp(),
    )
    op.create_index(
        "ix_member_activity_member_created", "member_activity", ["member_id", "created_at"],
    )
    op.create_table(
        "notifications",
        _id(),
        _member_fk(),
        sa.Column("type", sa.String(30), nullable=False, server_default="general"),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("link", sa.String(500), nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp(),
    )
    op.create_index("ix_notifications_member_id", "notifications", ["member_id"])
    op.create_table(
        "member_streaks",
        _id(),
        sa.Column(
            "member_id", UUID(as_uuid=True),
            sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column("current_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date, nullable=True),
        sa.Column("total_points", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index("ix_member_streaks_total_points", "member_streaks", ["total_points"])
    op.create_table(
        "member_badges",
        _id(),
        _member_fk(),
        sa.Column("badge_id", sa.String(50), nullable=False),
        _timestamp("earned_at"),
        sa.UniqueConstraint("member_id", "badge_id"),
    )
    op.create_table(
        "seasons",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("starts_on", sa.Date, nullable=True),
        sa.Column("ends_on", sa.Date, nullable=True),
        _timestamp(),
    )
    op.create_table(
        "member_seasons",
        _id(),
        _member_fk(),
        sa.Column(
            "season_id", UUID(as_uuid=True),
            sa.ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False,
        ),
        _timestamp("joined_at"),
        sa.UniqueConstraint("member_id", "season_id"),
    )

    # ─── Giving ──────────────────────────────────────────────────
    op.create_table(
        "donations",
        _id(),
        _member_fk(ondelete="SET NULL", nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("fund_name", sa.String(100), nullable=True),
        sa.Column("is_recurring", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(20), nullable=False, server_default="completed"),
        _timestamp(),
    )
    op.create_index("ix_donations_created_at", "donations", ["created_at"])

    # ─── Prayer ──────────────────────────────────────────────────
    op.create_table(
        "prayer_requests",
        _id(),
        _member_fk(ondelete="SET NULL", nullable=True),
        sa.Column("requester_name", sa.String(200), nullable=True),
        sa.Column("request_text", sa.Text, nullable=False),
        sa.Column("category", sa.String(20), nullable=False, server_default="other"),
        sa.Column("is_anonymous", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_urgent", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("prayer_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_answered", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("answered_at", nullable=True),
        sa.Column("testimony", sa.Text, nullable=True),
        _timestamp(),
        _timestamp("updated_at"),
    )
    op.create_table(
        "prayer_interactions",
        _id(),
        sa.Column(
            "prayer_id", UUID(as_uuid=True),
            sa.ForeignKey("prayer_requests.id", ondelete="CASCADE"), nullable=False,
        ),
        _member_fk(),
        _timestamp(),
        sa.UniqueConstraint("prayer_id", "member_id"),
    )

    # ─── Content ─────────────────────────────────────────────────
    op.create_table(
        "teachings",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(300), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("speaker", sa.String(200), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("video_url", sa.String(1000), nullable=True),
        sa.Column("audio_url", sa.String(1000), nullable=True),
        sa.Column("thumbnail_url", sa.String(1000), nullable=True),
        sa.Column("duration_minutes", sa.Integer, nullable=True),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        sa.Column("tier_required", sa.String(20), nullable=False, server_default="free"),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp(),
    )
    op.create_table(
        "teaching_progress",
        _id(),
        _member_fk(),
        sa.Column(
            "teaching_id", UUID(as_uuid=True),
            sa.ForeignKey("teachings.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("progress_seconds", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("last_watched_at"),
        sa.UniqueConstraint("member_id", "teaching_id"),
    )
    op.create_table(
        "resources",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("author", sa.String(200), nullable=True),
        sa.Column("resource_type", sa.String(30), nullable=False, server_default="ebook"),
        sa.Column("file_url", sa.String(1000), nullable=True),
        sa.Column("thumbnail_url", sa.String(1000), nullable=True),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("tier_required", sa.String(20), nullable=False, server_default="free"),
        sa.Column("download_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp(),
    )
    op.create_table(
        "sermons",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("speaker", sa.String(200), nullable=True),
        sa.Column("series_name", sa.String(200), nullable=True),
        sa.Column("sermon_date", sa.Date, nullable=True),
        sa.Column("video_url", sa.String(1000), nullable=True),
        sa.Column("thumbnail_url", sa.String(1000), nullable=True),
        sa.Column("duration_minutes", sa.Integer, nullable=True),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp(),
    )
    op.create_table(
        "prophecies",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(300), nullable=True),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("audio_url", sa.String(1000), nullable=True),
        sa.Column("tier_required", sa.String(20), nullable=False, server_default="free"),
        sa.Column("listen_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp(),
    )
    op.create_table(
        "gallery_albums",
        _id(),
        sa.Column("slug", sa.String(200), nullable=False, unique=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("cover_url", sa.String(1000), nullable=True),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp(),
    )
    op.create_table(
        "gallery_photos",
        _id(),
        sa.Column(
            "album_id", UUID(as_uuid=True),
            sa.ForeignKey("gallery_albums.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("image_url", sa.String(1000), nullable=False),
        sa.Column("caption", sa.String(500), nullable=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_table(
        "contact_submissions",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("subject", sa.String(300), nullable=True),
        sa.Column("message", sa.Text, nullable=False),
        _timestamp(),
    )

    # ─── Events, groups, volunteers, live ────────────────────────
    op.create_table(
        "events",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(300), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("event_type", sa.String(50), nullable=True),
        sa.Column("location", sa.String(300), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        _timestamp("end_date", nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="upcoming"),
        sa.Column("tier_required", sa.String(20), nullable=False, server_default="free"),
        sa.Column("volunteer_positions_needed", sa.Integer, nullable=True),
        sa.Column("max_attendees", sa.Integer, nullable=True),
        _timestamp(),
    )
    op.create_index("ix_events_start_date", "events", ["start_date"])
    op.create_table(
        "event_registrations",
        _id(),
        sa.Column(
            "event_id", UUID(as_uuid=True),
            sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False,
        ),
        _member_fk(),
        _timestamp(),
        sa.UniqueConstraint("event_id", "member_id"),
    )
    op.create_table(
        "groups",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("meeting_day", sa.String(10), nullable=True),
        sa.Column("meeting_time", sa.String(20), nullable=True),
        sa.Column("max_members", sa.Integer, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp(),
    )
    op.create_table(
        "group_members",
        _id(),
        sa.Column(
            "group_id", UUID(as_uuid=True),
            sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False,
        ),
        _member_fk(),
        _timestamp("joined_at"),
        sa.UniqueConstraint("group_id", "member_id"),
    )
    op.create_table(
        "volunteer_teams",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("required_count", sa.Integer, nullable=True),
    )
    op.create_table(
        "volunteer_team_members",
        _id(),
        sa.Column(
            "team_id", UUID(as_uuid=True),
            sa.ForeignKey("volunteer_teams.id", ondelete="CASCADE"), nullable=False,
        ),
        _member_fk(),
        sa.Column("role", sa.String(50), nullable=True),
        sa.UniqueConstraint("team_id", "member_id"),
    )
    op.create_table(
        "volunteer_availability",
        _id(),
        _member_fk(),
        sa.Column("day_of_week", sa.String(10), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=True),
        sa.Column("end_time", sa.String(5), nullable=True),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_table(
        "volunteer_schedules",
        _id(),
        sa.Column(
            "event_id", UUID(as_uuid=True),
            sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "team_id", UUID(as_uuid=True),
            sa.ForeignKey("volunteer_teams.id", ondelete="SET NULL"), nullable=True,
        ),
        _member_fk(),
        sa.Column("position", sa.String(100), nullable=False, server_default="General"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _timestamp(),
        sa.UniqueConstraint("event_id", "member_id"),
    )
    op.create_table(
        "live_services",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("stream_url", sa.String(1000), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("scheduled_start", sa.DateTime(timezone=True), nullable=False),
        _timestamp("actual_start", nullable=True),
        _timestamp("ended_at", nullable=True),
        _timestamp(),
    )
    op.create_table(
        "live_service_attendance",
        _id(),
        sa.Column(
            "service_id", UUID(as_uuid=True),
            sa.ForeignKey("live_services.id", ondelete="CASCADE"), nullable=False,
        ),
        _member_fk(),
        _timestamp("joined_at"),
        _timestamp("left_at", nullable=True),
        sa.UniqueConstraint("service_id", "member_id"),
    )

    # ─── Messaging ───────────────────────────────────────────────
    op.create_table(
        "email_campaigns",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("subject", sa.String(300), nullable=False),
        sa.Column("content", sa.JSON, nullable=False),
        sa.Column("html", sa.Text, nullable=True),
        sa.Column("target_audience", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("total_recipients", sa.Integer, nullable=False, server_default="0"),
        sa.Column("sent_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("failed_count", sa.Integer, nullable=False, server_default="0"),
        _member_fk("created_by", ondelete="SET NULL", nullable=True),
        _timestamp("sent_at", nullable=True),
        _timestamp(),
    )
    op.create_table(
        "email_send_logs",
        _id(),
        sa.Column(
            "campaign_id", UUID(as_uuid=True),
            sa.ForeignKey("email_campaigns.id", ondelete="CASCADE"), nullable=True,
        ),
        _member_fk(ondelete="SET NULL", nullable=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("provider_id", sa.String(100), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        _timestamp(),
    )
    op.create_index("ix_email_send_logs_campaign_id", "email_send_logs", ["campaign_id"])
    op.create_table(
        "sms_messages",
        _id(),
        sa.Column("direction", sa.String(10), nullable=False, server_default="outbound"),
        sa.Column("to_number", sa.String(32), nullable=False),
        sa.Column("from_number", sa.String(32), nullable=True),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("twilio_sid", sa.String(64), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        _member_fk("sent_by", ondelete="SET NULL", nullable=True),
        _timestamp(),
    )
    op.create_index("ix_sms_messages_created_at", "sms_messages", ["created_at"])

    # ─── Workflows ───────────────────────────────────────────────
    op.create_table(
        "workflows",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("trigger_type", sa.String(30), nullable=False),
        sa.Column("trigger_config", sa.JSON, nullable=False),
        sa.Column("action_type", sa.String(20), nullable=False),
        sa.Column("action_config", sa.JSON, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp("last_run", nullable=True),
        sa.Column("total_sent", sa.Integer, nullable=False, server_default="0"),
        _member_fk("created_by", ondelete="SET NULL", nullable=True),
        _timestamp(),
    )
    op.create_table(
        "workflow_executions",
        _id(),
        sa.Column(
            "workflow_id", UUID(as_uuid=True),
            sa.ForeignKey("workflows.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("workflow_name", sa.String(200), nullable=False),
        _member_fk(ondelete="SET NULL", nullable=True),
        sa.Column("member_name", sa.String(200), nullable=True),
        sa.Column("action_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("error_message", sa.Text, nullable=True),
        _timestamp("executed_at"),
    )
    op.create_index("ix_workflow_executions_workflow_id", "workflow_executions", ["workflow_id"])
    op.create_index("ix_workflow_executions_member_id", "workflow_executions", ["member_id"])

    # ─── AI ──────────────────────────────────────────────────────
    op.create_table(
        "ai_config",
        _id(),
        sa.Column("config_key", sa.String(100), nullable=False, unique=True),
        sa.Column("config_value", sa.Text, nullable=False),
    )
    op.create_table(
        "ai_knowledge_base",
        _id(),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("scripture_references", sa.JSON, nullable=False),
        sa.Column("priority", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_table(
        "ai_conversations",
        _id(),
        _member_fk(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("member_context", sa.JSON, nullable=False),
        _timestamp("last_message_at"),
        _timestamp(),
    )
    op.create_index("ix_ai_conversations_member_id", "ai_conversations", ["member_id"])
    op.create_table(
        "ai_messages",
        _id(),
        sa.Column(
            "conversation_id", UUID(as_uuid=True),
            sa.ForeignKey("ai_conversations.id", ondelete="CASCADE"), nullable=False,
        ),
        _member_fk(),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("tokens_used", sa.Integer, nullable=True),
        sa.Column("model_used", sa.String(100), nullable=True),
        _timestamp(),
    )
    op.create_index("ix_ai_messages_conversation_id", "ai_messages", ["conversation_id"])


def downgrade() -> None:
    for table in (
        "ai_messages", "ai_conversations", "ai_knowledge_base", "ai_config",
        "workflow_executions", "workflows",
        "sms_messages", "email_send_logs", "email_campaigns",
        "live_service_attendance", "live_services",
        "volunteer_schedules", "volunteer_availability", "volunteer_team_members",
        "volunteer_teams", "group_members", "groups", "event_registrations", "events",
        "contact_submissions", "gallery_photos", "gallery_albums",
        "prophecies", "sermons", "resources", "teaching_progress", "teachings",
        "prayer_interactions", "prayer_requests", "donations",
        "member_seasons", "seasons", "member_badges", "member_streaks",
        "notifications", "member_activity", "email_subscriptions",
        "member_spiritual_profiles", "members",
    ):
        op.drop_table(table)
