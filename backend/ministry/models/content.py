"""Content ORM — teachings, ebooks/resources, sermons, and prophetic words.

Invariants:
    - tier_required holds a Tier value; NULL or unknown strings are treated as free
    - Unpublished rows never reach members
    - teaching_progress is unique per (member, teaching)

Design Decisions:
    - Separate tables per content kind: each has its own media fields and the
      library merges them in core/library.py
"""

import uuid
from datetime import date, datetime

from sqlalchemy import (
    JSON, Boolean, Date, DateTime, ForeignKey, Integer, String, Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from ministry.db.base import Base, utcnow


class Teaching(Base):
    """Video, audio or article teaching."""
    __tablename__ = "teachings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(300), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    speaker: Mapped[str | None] = mapped_column(String(200), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    audio_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tier_required: Mapped[str] = mapped_column(String(20), nullable=False, default="free")
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "speaker": self.speaker,
            "category": self.category,
            "video_url": self.video_url,
            "audio_url": self.audio_url,
            "thumbnail_url": self.thumbnail_url,
            "duration_minutes": self.duration_minutes,
            "views": self.views,
            "tier_required": self.tier_required,
            "created_at": self.created_at,
        }


class TeachingProgress(Base):
    __tablename__ = "teaching_progress"
    __table_args__ = (UniqueConstraint("member_id", "teaching_id"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
    )
    teaching_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("teachings.id", ondelete="CASCADE"),
        nullable=False,
    )
    progress_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_watched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )


class Resource(Base):
    """Downloadable resource (ebook, guide, PDF)."""
    __tablename__ = "resources"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    author: Mapped[str | None] = mapped_column(String(200), nullable=True)
    resource_type: Mapped[str] = mapped_column(String(30), nullable=False, default="ebook")
    file_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    tier_required: Mapped[str] = mapped_column(String(20), nullable=False, default="free")
    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    def as_dict(self, include_file: bool = False) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "resource_type": self.resource_type,
            "thumbnail_url": self.thumbnail_url,
            "tags": self.tags or [],
            "tier_required": self.tier_required,
            "download_count": self.download_count,
            "created_at": self.created_at,
        }
        if include_file:
            data["file_url"] = self.file_url
        return data


class Sermon(Base):
    __tablename__ = "sermons"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    speaker: Mapped[str | None] = mapped_column(String(200), nullable=True)
    series_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    sermon_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "speaker": self.speaker,
            "series_name": self.series_name,
            "sermon_date": self.sermon_date,
            "video_url": self.video_url,
            "thumbnail_url": self.thumbnail_url,
            "duration_minutes": self.duration_minutes,
            "created_at": self.created_at,
        }


class Prophecy(Base):
    """Published prophetic word (prophecy hub)."""
    __tablename__ = "prophecies"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(300), nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    audio_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    tier_required: Mapped[str] = mapped_column(String(20), nullable=False, default="free")
    listen_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "audio_url": self.audio_url,
            "tier_required": self.tier_required,
            "created_at": self.created_at,
        }
