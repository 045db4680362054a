"""AI Schemas — pastoral chat request."""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    """Chat turn — message 1-4000 chars, stripped."""
    message: str = Field(min_length=1, max_length=4000)
    conversation_id: UUID | None = None

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty or whitespace")
        return v
