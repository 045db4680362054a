"""Gamification Service — points, streaks, badges, and leaderboard position.

Invariants:
    - MemberStreak row created lazily on the first award
    - Badge points are added to total_points in the same commit as the badge rows
    - Leaderboard = top LEADERBOARD_SIZE members by total_points (1-indexed, 0 if absent)
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.dates import utcnow
from ministry.core.gamification import (
    BADGES, advance_streak, badge_points, describe_badge, leaderboard_position,
    level_progress, new_badges, points_for_action,
)
from ministry.models.gamification import MemberBadge, MemberStreak
from ministry.models.member import Member

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 100


async def _streak_row(db: AsyncSession, member: Member) -> MemberStreak | None:
    return await db.scalar(
        select(MemberStreak).where(MemberStreak.member_id == member.id),
    )


async def _earned(db: AsyncSession, member: Member) -> list[MemberBadge]:
    rows = await db.execute(
        select(MemberBadge)
        .where(MemberBadge.member_id == member.id)
        .order_by(MemberBadge.earned_at),
    )
    return list(rows.scalars().all())


async def get_summary(db: AsyncSession, member: Member) -> dict:
    streak = await _streak_row(db, member)
    points = streak.total_points if streak else 0
    earned = await _earned(db, member)
    earned_ids = {b.badge_id for b in earned}

    ranked = (await db.execute(
        select(MemberStreak.member_id)
        .order_by(MemberStreak.total_points.desc())
        .limit(LEADERBOARD_SIZE),
    )).scalars().all()

    return {
        "stats": {
            "total_points": points,
            "current_streak": streak.current_streak if streak else 0,
            "longest_streak": streak.longest_streak if streak else 0,
            "last_activity_date": streak.last_activity_date if streak else None,
        },
        "level": level_progress(points),
        "badges": {
            "earned": [
                {**describe_badge(b.badge_id), "earned_at": b.earned_at}
                for b in earned
            ],
            "available": [
                describe_badge(badge_id) for badge_id in BADGES
                if badge_id not in earned_ids
            ],
        },
        "leaderboard_position": leaderboard_position(member.id, list(ranked)),
    }


async def award_action(
    db: AsyncSession, member: Member, action: str, custom_points: int | None = None,
) -> dict:
    """Award points for an action, advance the streak, unlock badges."""
    today = utcnow().date()
    points = points_for_action(action, custom_points)

    streak = await _streak_row(db, member)
    if streak is None:
        streak = MemberStreak(
            member_id=member.id, current_streak=0, longest_streak=0, total_points=0,
        )
        db.add(streak)

    update = advance_streak(
        streak.last_activity_date, today,
        streak.current_streak or 0, streak.longest_streak or 0,
    )
    streak.current_streak = update.current
    streak.longest_streak = update.longest
    streak.last_activity_date = update.last_activity

    earned_ids = {b.badge_id for b in await _earned(db, member)}
    unlocked = new_badges(action, update.current, earned_ids)
    for badge_id in unlocked:
        db.add(MemberBadge(member_id=member.id, badge_id=badge_id))

    streak.total_points = (streak.total_points or 0) + points + badge_points(unlocked)
    await db.commit()

    if unlocked:
        logger.info(
            f"Badges unlocked: {', '.join(unlocked)}",
            extra={"member_id": str(member.id)},
        )
    return {
        "points_added": points,
        "new_badges": [describe_badge(b) for b in unlocked],
        "current_streak": streak.current_streak,
        "total_points": streak.total_points,
    }
