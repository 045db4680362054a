"""Donation ORM — one gift, recurring or one-time.

Invariants:
    - amount is positive, stored with cents precision
    - status is "completed" for one-off gifts; recurring subscriptions stay "active"
      while live, and only those count towards MRR
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from ministry.db.base import Base, utcnow


class Donation(Base):
    __tablename__ = "donations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    member_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=False,
    )
    fund_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="completed")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True,
    )

    def as_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "amount": self.amount,
            "fund_name": self.fund_name,
            "is_recurring": self.is_recurring,
            "created_at": self.created_at,
        }
