"""Member Service — admin member management and the member's own portal data.

Invariants:
    - Role changes need both the target's current role and the new role to be
      in assignable_roles(caller.role) (core.access.can_change_role)
    - Settings updates touch only fields the member sent (exclude_unset)
    - Notifications are only visible to, and markable by, their owner
    - Activity rows are append-only

Design Decisions:
    - Thin async functions over AsyncSession: every route is a fetch-compute-return
      sandwich, pure computation lives in core/ (ADR: impureim sandwich)
    - record_activity/create_notification exported: gamification, library, AI chat
      and volunteer scheduling all write these rows
"""

import logging
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.access import can_change_role
from ministry.core.dates import utcnow
from ministry.core.domain_types import Role, SubscriptionType
from ministry.core.errors import (
    ConflictError, PermissionDeniedError, ResourceNotFoundError,
)
from ministry.core.member_stats import dashboard_stats
from ministry.models.activity import MemberActivity
from ministry.models.gamification import MemberStreak
from ministry.models.member import EmailSubscription, Member
from ministry.models.notification import Notification
from ministry.models.season import MemberSeason, Season
from ministry.schemas.member import ActivityCreate, MemberSettingsUpdate

logger = logging.getLogger(__name__)


def member_summary(member: Member) -> dict:
    return {
        "id": member.id,
        "email": member.email,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "role": member.role,
        "tier": member.tier,
        "created_at": member.created_at,
    }


async def get_member_or_404(db: AsyncSession, member_id: uuid.UUID) -> Member:
    member = await db.get(Member, member_id)
    if member is None:
        raise ResourceNotFoundError("Member", str(member_id))
    return member


# ─── Shared writers ──────────────────────────────────────────────

def record_activity(
    db: AsyncSession,
    member_id: uuid.UUID,
    activity_type: str,
    *,
    resource_type: str | None = None,
    resource_id: str | None = None,
    resource_name: str | None = None,
    details: dict | None = None,
) -> MemberActivity:
    """Stage an activity row (caller commits)."""
    activity = MemberActivity(
        member_id=member_id,
        activity_type=activity_type,
        resource_type=resource_type,
        resource_id=resource_id,
        resource_name=resource_name,
        details=details,
    )
    db.add(activity)
    return activity


def create_notification(
    db: AsyncSession,
    member_id: uuid.UUID,
    title: str,
    message: str,
    *,
    type: str = "general",
    link: str | None = None,
) -> Notification:
    """Stage an in-app notification (caller commits)."""
    notification = Notification(
        member_id=member_id, title=title, message=message, type=type, link=link,
    )
    db.add(notification)
    return notification


# ─── Admin ───────────────────────────────────────────────────────

async def list_members(
    db: AsyncSession, search: str | None = None, tier: str | None = None,
) -> dict:
    query = select(Member).order_by(Member.created_at.desc())
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(or_(
            func.lower(Member.first_name).like(pattern),
            func.lower(Member.last_name).like(pattern),
            func.lower(Member.email).like(pattern),
        ))
    if tier:
        query = query.where(Member.tier == tier)
    members = (await db.execute(query)).scalars().all()

    tier_rows = await db.execute(
        select(Member.tier, func.count()).group_by(Member.tier),
    )
    by_tier = {row[0]: row[1] for row in tier_rows.all()}
    total = sum(by_tier.values())
    admins = await db.scalar(
        select(func.count()).select_from(Member).where(Member.role == Role.ADMIN.value),
    )
    return {
        "members": [member_summary(m) for m in members],
        "stats": {
            "total": total,
            "by_tier": by_tier,
            "admins": admins or 0,
        },
    }


async def change_role(
    db: AsyncSession, caller: Member, member_id: uuid.UUID, role: Role,
) -> dict:
    member = await get_member_or_404(db, member_id)
    if not can_change_role(caller.role, member.role, role.value):
        raise PermissionDeniedError(Role.ADMIN.value)
    previous = member.role
    member.role = role.value
    await db.commit()
    logger.info(
        f"Role changed {previous} -> {role.value}",
        extra={"member_id": str(member.id)},
    )
    return member_summary(member)


async def change_tier(db: AsyncSession, member_id: uuid.UUID, tier: str) -> dict:
    member = await get_member_or_404(db, member_id)
    member.tier = tier
    await db.commit()
    logger.info(f"Tier set to {tier}", extra={"member_id": str(member.id)})
    return member_summary(member)


# ─── Portal ──────────────────────────────────────────────────────

def _subscriptions(member: Member) -> dict[str, bool]:
    flags = {t.value: True for t in SubscriptionType}
    for sub in member.subscriptions:
        flags[sub.subscription_type] = sub.is_subscribed
    return flags


def profile(member: Member) -> dict:
    return {
        **member_summary(member),
        "phone": member.phone,
        "bio": member.bio,
        "location": member.location,
        "date_of_birth": member.date_of_birth,
        "spiritual_profile": member.profile.as_dict() if member.profile else None,
        "email_subscriptions": _subscriptions(member),
    }


async def update_settings(
    db: AsyncSession, member: Member, body: MemberSettingsUpdate,
) -> dict:
    changes = body.model_dump(exclude_unset=True, exclude={"email_subscriptions"})
    for field, value in changes.items():
        setattr(member, field, value)

    if body.email_subscriptions is not None:
        toggles = body.email_subscriptions.model_dump(exclude_none=True)
        existing = {s.subscription_type: s for s in member.subscriptions}
        for subscription_type, subscribed in toggles.items():
            row = existing.get(subscription_type)
            if row is None:
                member.subscriptions.append(EmailSubscription(
                    subscription_type=subscription_type, is_subscribed=subscribed,
                ))
            else:
                row.is_subscribed = subscribed

    await db.commit()
    await db.refresh(member)
    return profile(member)


async def get_dashboard_stats(db: AsyncSession, member: Member) -> dict:
    activity_rows = await db.execute(
        select(MemberActivity.activity_type, MemberActivity.created_at)
        .where(MemberActivity.member_id == member.id),
    )
    activities = [
        {"activity_type": row[0], "created_at": row[1]} for row in activity_rows.all()
    ]
    streak = await db.scalar(
        select(MemberStreak.current_streak).where(MemberStreak.member_id == member.id),
    )
    seasons_joined = await db.scalar(
        select(func.count()).select_from(MemberSeason)
        .where(MemberSeason.member_id == member.id),
    )
    return dashboard_stats(
        activities,
        joined_at=member.created_at,
        now=utcnow(),
        current_streak=streak or 0,
        seasons_joined=seasons_joined or 0,
    )


async def list_seasons(db: AsyncSession, member: Member) -> list[dict]:
    seasons = (await db.execute(
        select(Season).where(Season.is_active.is_(True)).order_by(Season.created_at),
    )).scalars().all()
    joined = set((await db.execute(
        select(MemberSeason.season_id).where(MemberSeason.member_id == member.id),
    )).scalars().all())
    return [
        {
            "id": s.id,
            "name": s.name,
            "description": s.description,
            "starts_on": s.starts_on,
            "ends_on": s.ends_on,
            "joined": s.id in joined,
        }
        for s in seasons
    ]


async def join_season(db: AsyncSession, member: Member, season_id: uuid.UUID) -> dict:
    season = await db.get(Season, season_id)
    if season is None or not season.is_active:
        raise ResourceNotFoundError("Season", str(season_id))
    already = await db.scalar(
        select(MemberSeason.id).where(
            MemberSeason.member_id == member.id,
            MemberSeason.season_id == season_id,
        ),
    )
    if already:
        raise ConflictError("Already joined this season")
    db.add(MemberSeason(member_id=member.id, season_id=season_id))
    await db.commit()
    return {"success": True, "season_id": season_id}


async def list_notifications(
    db: AsyncSession, member: Member, unread_only: bool = False, limit: int = 50,
) -> dict:
    query = (
        select(Notification)
        .where(Notification.member_id == member.id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    rows = (await db.execute(query)).scalars().all()
    unread = await db.scalar(
        select(func.count()).select_from(Notification).where(
            Notification.member_id == member.id, Notification.is_read.is_(False),
        ),
    )
    return {
        "notifications": [n.as_dict() for n in rows],
        "unread_count": unread or 0,
    }


async def mark_notification_read(
    db: AsyncSession, member: Member, notification_id: uuid.UUID,
) -> dict:
    notification = await db.get(Notification, notification_id)
    if notification is None or notification.member_id != member.id:
        raise ResourceNotFoundError("Notification", str(notification_id))
    notification.is_read = True
    await db.commit()
    return notification.as_dict()


async def log_activity(db: AsyncSession, member: Member, body: ActivityCreate) -> dict:
    activity = record_activity(
        db, member.id, body.activity_type,
        resource_type=body.resource_type,
        resource_id=body.resource_id,
        resource_name=body.resource_name,
        details=body.details,
    )
    await db.commit()
    return {
        "id": activity.id,
        "activity_type": activity.activity_type,
        "created_at": activity.created_at,
    }
