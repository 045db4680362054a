"""Library Service — merged teaching/resource/sermon catalogue, resource downloads, progress.

Invariants:
    - Only published rows are listed or downloadable
    - Gated resources raise TierAccessError (403) with an upgrade message
    - download_count increments only on a successful (accessible) fetch
    - First progress save for a teaching records one `teaching_viewed` activity
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.access import add_access_info, can_access_tier, upgrade_message
from ministry.core.dates import utcnow
from ministry.core.domain_types import ActivityType
from ministry.core.errors import ResourceNotFoundError, TierAccessError
from ministry.core.library import (
    build_library, resource_entry, sermon_entry, teaching_entry,
)
from ministry.models.content import Resource, Sermon, Teaching, TeachingProgress
from ministry.models.member import Member
from ministry.services.member_service import record_activity

logger = logging.getLogger(__name__)


async def get_library(
    db: AsyncSession, member: Member, tab: str = "all", search: str = "", tag: str = "",
) -> dict:
    teachings = (await db.execute(
        select(Teaching).where(Teaching.is_published.is_(True)),
    )).scalars().all()
    resources = (await db.execute(
        select(Resource).where(Resource.is_published.is_(True)),
    )).scalars().all()
    sermons = (await db.execute(
        select(Sermon).where(Sermon.is_published.is_(True)),
    )).scalars().all()
    progress_rows = (await db.execute(
        select(TeachingProgress).where(TeachingProgress.member_id == member.id),
    )).scalars().all()
    progress = {
        p.teaching_id: {
            "progress_seconds": p.progress_seconds,
            "completed": p.completed,
            "last_watched_at": p.last_watched_at,
        }
        for p in progress_rows
    }

    items = (
        [
            teaching_entry(t.as_dict(), progress.get(t.id), member.tier, member.role)
            for t in teachings
        ]
        + [resource_entry(r.as_dict(), member.tier, member.role) for r in resources]
        + [sermon_entry(s.as_dict()) for s in sermons]
    )
    library = build_library(items, tab=tab, search=search, tag=tag)
    library["member_tier"] = member.tier
    return library


async def list_resources(
    db: AsyncSession, member: Member, resource_type: str | None = None,
) -> list[dict]:
    query = (
        select(Resource)
        .where(Resource.is_published.is_(True))
        .order_by(Resource.created_at.desc())
    )
    if resource_type:
        query = query.where(Resource.resource_type == resource_type)
    resources = (await db.execute(query)).scalars().all()
    return add_access_info(
        [r.as_dict() for r in resources], member.tier, member.role,
    )


async def get_resource(db: AsyncSession, member: Member, resource_id: uuid.UUID) -> dict:
    resource = await db.get(Resource, resource_id)
    if resource is None or not resource.is_published:
        raise ResourceNotFoundError("Resource", str(resource_id))
    if not can_access_tier(member.tier, resource.tier_required, member.role):
        raise TierAccessError(
            resource.tier_required, upgrade_message(resource.tier_required),
        )
    resource.download_count = (resource.download_count or 0) + 1
    await db.commit()
    return {**resource.as_dict(include_file=True), "has_access": True}


async def save_progress(
    db: AsyncSession,
    member: Member,
    teaching_id: uuid.UUID,
    progress_seconds: int,
    completed: bool,
) -> dict:
    teaching = await db.get(Teaching, teaching_id)
    if teaching is None or not teaching.is_published:
        raise ResourceNotFoundError("Teaching", str(teaching_id))

    row = await db.scalar(
        select(TeachingProgress).where(
            TeachingProgress.member_id == member.id,
            TeachingProgress.teaching_id == teaching_id,
        ),
    )
    first_view = row is None
    if first_view:
        row = TeachingProgress(member_id=member.id, teaching_id=teaching_id)
        db.add(row)
        teaching.views = (teaching.views or 0) + 1
        record_activity(
            db, member.id, ActivityType.TEACHING_VIEWED.value,
            resource_type="teaching",
            resource_id=str(teaching_id),
            resource_name=teaching.title,
        )
    row.progress_seconds = progress_seconds
    row.completed = completed or bool(row.completed)
    row.last_watched_at = utcnow()
    await db.commit()
    return {
        "teaching_id": teaching_id,
        "progress_seconds": row.progress_seconds,
        "completed": row.completed,
        "first_view": first_view,
    }
