"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - Timestamps are timezone-aware UTC (utcnow default)

Design Decisions:
    - Separate file for Base: avoids circular imports between models
"""

from sqlalchemy.orm import DeclarativeBase

from ministry.core.dates import utcnow

__all__ = ["Base", "utcnow"]


class Base(DeclarativeBase):
    """Base class for all ministry ORM models."""
    pass
