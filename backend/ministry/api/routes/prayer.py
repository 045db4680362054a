"""Prayer Wall Routes — public listing, submission, praying, and staff moderation.

Invariants:
    - Submitting and praying work with or without a token
    - Moderation requires staff+
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import get_optional_member, require_staff
from ministry.core.domain_types import PrayerCategory
from ministry.infrastructure.database import get_db
from ministry.models.member import Member
from ministry.schemas.prayer import PrayerCreate, PrayerStatusUpdate
from ministry.services import prayer_service

router = APIRouter(prefix="/api/v1", tags=["prayer"])


@router.post("/prayer", status_code=status.HTTP_201_CREATED)
async def submit_prayer(
    body: PrayerCreate,
    member: Member | None = Depends(get_optional_member),
    db: AsyncSession = Depends(get_db),
):
    return await prayer_service.submit(db, body, member)


@router.get("/prayer")
async def list_prayers(
    category: PrayerCategory | None = Query(None),
    sort: str = Query("newest", pattern="^(newest|most-prayed|urgent)$"),
    answered: bool | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await prayer_service.list_public(
        db,
        category=category.value if category else None,
        sort=sort, answered=answered, page=page, limit=limit,
    )


@router.post("/prayer/{prayer_id}/pray")
async def pray_for(
    prayer_id: UUID,
    member: Member | None = Depends(get_optional_member),
    db: AsyncSession = Depends(get_db),
):
    return await prayer_service.pray(db, prayer_id, member)


@router.post("/admin/prayer/{prayer_id}/status")
async def moderate_prayer(
    prayer_id: UUID,
    body: PrayerStatusUpdate,
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await prayer_service.moderate(db, prayer_id, body)
