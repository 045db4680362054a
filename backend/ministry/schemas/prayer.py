"""Prayer Schemas — submission and moderation payloads.

Invariants:
    - request_text: 1-500 chars after stripping
    - category is a PrayerCategory
    - Moderation actions: approve | archive | answered
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ministry.core.domain_types import PrayerCategory


class PrayerCreate(BaseModel):
    request_text: str = Field(min_length=1, max_length=500)
    category: PrayerCategory = PrayerCategory.OTHER
    requester_name: str | None = Field(None, max_length=200)
    is_anonymous: bool = False
    is_public: bool = True
    is_urgent: bool = False

    @field_validator("request_text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("request_text cannot be empty or whitespace")
        return v


class PrayerStatusUpdate(BaseModel):
    action: Literal["approve", "archive", "answered"]
    testimony: str | None = Field(None, max_length=5000)
