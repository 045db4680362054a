"""Public Schemas — contact form payload."""

from pydantic import BaseModel, EmailStr, Field, field_validator


class ContactCreate(BaseModel):
    """Contact form — name and message must carry text after stripping."""
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = Field(None, max_length=32)
    subject: str | None = Field(None, max_length=300)
    message: str = Field(min_length=1, max_length=5000)

    @field_validator("name", "message")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v
