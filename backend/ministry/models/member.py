"""Member ORM — the authenticated person, their spiritual profile, and email preferences.

Invariants:
    - user_id is the auth provider's subject (JWT `sub`), unique per member
    - role and tier are independent ladders (core/access.py)
    - At most one SpiritualProfile per member
    - (member_id, subscription_type) unique in email_subscriptions

Design Decisions:
    - JSON columns for gift/strength lists: portable across PostgreSQL and SQLite tests
"""

import uuid
from datetime import date, datetime

from sqlalchemy import (
    JSON, Boolean, Date, DateTime, ForeignKey, Integer, String, Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ministry.db.base import Base, utcnow


class Member(Base):
    """Member aggregate root."""
    __tablename__ = "members"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="member")
    tier: Mapped[str] = mapped_column(String(20), nullable=False, default="free")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    profile: Mapped["SpiritualProfile"] = relationship(
        "SpiritualProfile", back_populates="member", uselist=False,
        cascade="all, delete-orphan", lazy="selectin",
    )
    subscriptions: Mapped[list["EmailSubscription"]] = relationship(
        "EmailSubscription", back_populates="member",
        cascade="all, delete-orphan", lazy="selectin",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class SpiritualProfile(Base):
    """Assessment results and growth counters used for personalisation."""
    __tablename__ = "member_spiritual_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    primary_gift: Mapped[str | None] = mapped_column(String(50), nullable=True)
    secondary_gifts: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    current_season: Mapped[str | None] = mapped_column(String(50), nullable=True)
    total_devotionals_read: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_journal_entries: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_prayers_submitted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    growth_areas: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    strengths: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    member: Mapped["Member"] = relationship("Member", back_populates="profile")

    def as_dict(self) -> dict:
        return {
            "primary_gift": self.primary_gift,
            "secondary_gifts": self.secondary_gifts or [],
            "current_season": self.current_season,
            "total_devotionals_read": self.total_devotionals_read,
            "total_journal_entries": self.total_journal_entries,
            "total_prayers_submitted": self.total_prayers_submitted,
            "growth_areas": self.growth_areas or [],
            "strengths": self.strengths or [],
        }


class EmailSubscription(Base):
    """Opt-in/out row per member and list."""
    __tablename__ = "email_subscriptions"
    __table_args__ = (UniqueConstraint("member_id", "subscription_type"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
    )
    subscription_type: Mapped[str] = mapped_column(String(40), nullable=False)
    is_subscribed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    member: Mapped["Member"] = relationship("Member", back_populates="subscriptions")
