"""MemberActivity ORM — append-only log of what members do.

Invariants:
    - Rows are never updated; engagement metrics are derived from them
    - activity_type values come from core.domain_types.ActivityType (not enforced in DB)

Design Decisions:
    - `details` maps to a JSON column named metadata: `metadata` is reserved on
      declarative classes
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from ministry.db.base import Base, utcnow


class MemberActivity(Base):
    __tablename__ = "member_activity"
    __table_args__ = (Index("ix_member_activity_member_created", "member_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
    )
    activity_type: Mapped[str] = mapped_column(String(40), nullable=False)
    resource_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    resource_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    resource_name: Mapped[str | None] = mapped_column(String(300), nullable=True)
    details: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
