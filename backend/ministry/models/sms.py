"""SmsMessage ORM — log of every outbound text, delivered or not."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from ministry.db.base import Base, utcnow


class SmsMessage(Base):
    __tablename__ = "sms_messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    direction: Mapped[str] = mapped_column(String(10), nullable=False, default="outbound")
    to_number: Mapped[str] = mapped_column(String(32), nullable=False)
    from_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    twilio_sid: Mapped[str | None] = mapped_column(String(64), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True,
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "direction": self.direction,
            "to_number": self.to_number,
            "from_number": self.from_number,
            "body": self.body,
            "status": self.status,
            "twilio_sid": self.twilio_sid,
            "error_message": self.error_message,
            "created_at": self.created_at,
        }
