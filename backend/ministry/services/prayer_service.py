"""Prayer Service — prayer wall submission, listing, praying, and moderation.

Invariants:
    - New requests are `pending` until staff approve them
    - Listing shows only `active` + public requests and never exposes member_id
    - Anonymous requests render requester as "Anonymous"
    - A logged-in member increments prayer_count at most once per request
    - Anonymous callers always increment, without an interaction row
"""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.dates import utcnow
from ministry.core.domain_types import ActivityType, PrayerStatus
from ministry.core.errors import ResourceNotFoundError
from ministry.models.member import Member
from ministry.models.prayer import PrayerInteraction, PrayerRequest
from ministry.schemas.prayer import PrayerCreate, PrayerStatusUpdate
from ministry.services.member_service import record_activity

logger = logging.getLogger(__name__)

SORTS = ("newest", "most-prayed", "urgent")


def _public_view(prayer: PrayerRequest) -> dict:
    return {
        "id": prayer.id,
        "requester": (
            "Anonymous" if prayer.is_anonymous else (prayer.requester_name or "Friend")
        ),
        "request_text": prayer.request_text,
        "category": prayer.category,
        "is_urgent": prayer.is_urgent,
        "prayer_count": prayer.prayer_count,
        "is_answered": prayer.is_answered,
        "answered_at": prayer.answered_at,
        "testimony": prayer.testimony,
        "created_at": prayer.created_at,
    }


async def submit(db: AsyncSession, body: PrayerCreate, member: Member | None) -> dict:
    requester = body.requester_name
    if not requester and member is not None:
        requester = member.full_name or None
    prayer = PrayerRequest(
        member_id=member.id if member else None,
        requester_name=requester,
        request_text=body.request_text,
        category=body.category.value,
        is_anonymous=body.is_anonymous,
        is_public=body.is_public,
        is_urgent=body.is_urgent,
        status=PrayerStatus.PENDING.value,
    )
    db.add(prayer)
    if member is not None:
        record_activity(
            db, member.id, ActivityType.PRAYER_SUBMITTED.value,
            resource_type="prayer", resource_name=body.category.value,
        )
    await db.commit()
    logger.info("Prayer request submitted", extra={
        "member_id": str(member.id) if member else None,
    })
    return {"id": prayer.id, "status": prayer.status}


async def list_public(
    db: AsyncSession,
    *,
    category: str | None = None,
    sort: str = "newest",
    answered: bool | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    conditions = [
        PrayerRequest.status == PrayerStatus.ACTIVE.value,
        PrayerRequest.is_public.is_(True),
    ]
    if category:
        conditions.append(PrayerRequest.category == category)
    if answered is not None:
        conditions.append(PrayerRequest.is_answered.is_(answered))

    match sort:
        case "most-prayed":
            order = (PrayerRequest.prayer_count.desc(), PrayerRequest.created_at.desc())
        case "urgent":
            order = (PrayerRequest.is_urgent.desc(), PrayerRequest.created_at.desc())
        case _:
            order = (PrayerRequest.created_at.desc(),)

    total = await db.scalar(
        select(func.count()).select_from(PrayerRequest).where(*conditions),
    ) or 0
    offset = (page - 1) * limit
    rows = (await db.execute(
        select(PrayerRequest).where(*conditions).order_by(*order)
        .offset(offset).limit(limit),
    )).scalars().all()
    return {
        "prayers": [_public_view(p) for p in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "has_more": offset + len(rows) < total,
        },
    }


async def pray(db: AsyncSession, prayer_id: uuid.UUID, member: Member | None) -> dict:
    prayer = await db.get(PrayerRequest, prayer_id)
    if prayer is None:
        raise ResourceNotFoundError("PrayerRequest", str(prayer_id))

    if member is not None:
        existing = await db.scalar(
            select(PrayerInteraction.id).where(
                PrayerInteraction.prayer_id == prayer_id,
                PrayerInteraction.member_id == member.id,
            ),
        )
        if existing:
            return {
                "success": True,
                "already_prayed": True,
                "message": "You have already prayed for this request",
                "prayer_count": prayer.prayer_count,
            }
        db.add(PrayerInteraction(prayer_id=prayer_id, member_id=member.id))

    prayer.prayer_count = (prayer.prayer_count or 0) + 1
    await db.commit()
    return {
        "success": True,
        "already_prayed": False,
        "prayer_count": prayer.prayer_count,
    }


async def moderate(
    db: AsyncSession, prayer_id: uuid.UUID, body: PrayerStatusUpdate,
) -> dict:
    prayer = await db.get(PrayerRequest, prayer_id)
    if prayer is None:
        raise ResourceNotFoundError("PrayerRequest", str(prayer_id))

    match body.action:
        case "approve":
            prayer.status = PrayerStatus.ACTIVE.value
        case "archive":
            prayer.status = PrayerStatus.ARCHIVED.value
        case "answered":
            prayer.is_answered = True
            prayer.answered_at = utcnow()
            if body.testimony:
                prayer.testimony = body.testimony
    await db.commit()
    logger.info(f"Prayer {prayer_id} moderated: {body.action}")
    return {
        "id": prayer.id,
        "status": prayer.status,
        "is_answered": prayer.is_answered,
        "answered_at": prayer.answered_at,
    }
