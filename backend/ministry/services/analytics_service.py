"""Admin Analytics Service — loads rows per section and hands them to core/analytics.py.

Invariants:
    - Windowed activity rows (trailing 30 days) feed counts and engagement; at-risk
      status reads each member's all-time latest activity, so 999 means "never active"
    - Donations loaded from the start of last month (this/last month comparison)
    - Unknown section → ValidationFailedError (400)
"""

from datetime import timedelta

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.analytics import engagement_metrics, giving_metrics, member_metrics
from ministry.core.dates import utcnow
from ministry.core.errors import ValidationFailedError
from ministry.models.activity import MemberActivity
from ministry.models.content import Resource, Teaching
from ministry.models.donation import Donation
from ministry.models.member import Member

SECTIONS = ("all", "members", "engagement", "giving", "content")
ACTIVITY_LOOKBACK_DAYS = 30
TOP_CONTENT_LIMIT = 5


async def _activities(db: AsyncSession, since) -> list[dict]:
    rows = await db.execute(
        select(
            MemberActivity.member_id,
            MemberActivity.activity_type,
            MemberActivity.created_at,
        ).where(MemberActivity.created_at >= since),
    )
    return [
        {"member_id": r[0], "activity_type": r[1], "created_at": r[2]}
        for r in rows.all()
    ]


async def _last_seen(db: AsyncSession) -> dict[str, dict]:
    newest = (
        select(
            MemberActivity.member_id,
            func.max(MemberActivity.created_at).label("last_at"),
        )
        .group_by(MemberActivity.member_id)
        .subquery()
    )
    rows = await db.execute(
        select(
            MemberActivity.member_id,
            MemberActivity.activity_type,
            MemberActivity.created_at,
        ).join(
            newest,
            and_(
                MemberActivity.member_id == newest.c.member_id,
                MemberActivity.created_at == newest.c.last_at,
            ),
        ),
    )
    return {
        str(r[0]): {"member_id": r[0], "activity_type": r[1], "created_at": r[2]}
        for r in rows.all()
    }


async def _members(db: AsyncSession) -> list[dict]:
    rows = await db.execute(
        select(
            Member.id, Member.first_name, Member.last_name,
            Member.tier, Member.created_at,
        ),
    )
    return [
        {
            "id": r[0], "first_name": r[1], "last_name": r[2],
            "tier": r[3], "created_at": r[4],
        }
        for r in rows.all()
    ]


async def _content(db: AsyncSession) -> dict:
    teachings = (await db.execute(
        select(Teaching).where(Teaching.is_published.is_(True))
        .order_by(Teaching.views.desc()).limit(TOP_CONTENT_LIMIT),
    )).scalars().all()
    resources = (await db.execute(
        select(Resource).where(Resource.is_published.is_(True))
        .order_by(Resource.download_count.desc()).limit(TOP_CONTENT_LIMIT),
    )).scalars().all()
    return {
        "top_teachings": [
            {"id": t.id, "title": t.title, "views": t.views} for t in teachings
        ],
        "top_resources": [
            {"id": r.id, "title": r.title, "downloads": r.download_count}
            for r in resources
        ],
        "total_teaching_views": sum(t.views for t in teachings),
        "total_downloads": sum(r.download_count for r in resources),
    }


async def get_analytics(db: AsyncSession, section: str = "all") -> dict:
    if section not in SECTIONS:
        raise ValidationFailedError(f"Unknown section: {section}", "section")
    now = utcnow()
    wanted = set(SECTIONS[1:]) if section == "all" else {section}
    result: dict = {"generated_at": now}

    activities: list[dict] | None = None
    if wanted & {"members", "engagement"}:
        activities = await _activities(db, now - timedelta(days=ACTIVITY_LOOKBACK_DAYS))

    if "members" in wanted:
        result["members"] = member_metrics(
            await _members(db), activities, now, last_seen=await _last_seen(db),
        )
    if "engagement" in wanted:
        result["engagement"] = engagement_metrics(activities, now)
    if "giving" in wanted:
        since = (now.replace(day=1) - timedelta(days=1)).replace(
            day=1, hour=0, minute=0, second=0, microsecond=0,
        )
        donations = (await db.execute(
            select(Donation).where(
                Donation.created_at >= since, Donation.status == "completed",
            ),
        )).scalars().all()
        result["giving"] = giving_metrics([d.as_dict() for d in donations], now)
    if "content" in wanted:
        result["content"] = await _content(db)
    return result
