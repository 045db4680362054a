"""Recommendation Service — personalised groups, events, teachings, and prophecies.

Invariants:
    - Excludes groups already joined, events already registered, teachings already viewed
    - Event/teaching candidates respect tier gating
    - AI summary is optional: failures degrade to ""
"""

import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.access import can_access_tier
from ministry.core.dates import utcnow
from ministry.core.domain_types import EventStatus
from ministry.core.errors import AnthropicAPIError, ValidationFailedError
from ministry.core.recommendations import (
    TOP_PROPHECIES, rank_events, rank_groups, rank_teachings, summary_prompt,
)
from ministry.infrastructure.anthropic_client import ResilientAnthropicClient
from ministry.models.content import Prophecy, Teaching, TeachingProgress
from ministry.models.event import Event, EventRegistration
from ministry.models.group import Group, GroupMember
from ministry.models.member import Member

logger = logging.getLogger(__name__)

TYPES = ("all", "groups", "events", "content")
EVENT_HORIZON_DAYS = 60
SUMMARY_SYSTEM_PROMPT = (
    "You are a caring pastor. In exactly two warm sentences, tell this member "
    "what to focus on this week based on their gift, season, and top matches."
)


async def _groups(db: AsyncSession, member: Member, gift, season) -> list[dict]:
    joined = select(GroupMember.group_id).where(GroupMember.member_id == member.id)
    groups = (await db.execute(
        select(Group).where(Group.is_active.is_(True), Group.id.not_in(joined)),
    )).scalars().all()
    return rank_groups([g.as_dict() for g in groups], gift, season)


async def _events(db: AsyncSession, member: Member, gift, now) -> list[dict]:
    registered = select(EventRegistration.event_id).where(
        EventRegistration.member_id == member.id,
    )
    events = (await db.execute(
        select(Event).where(
            Event.start_date >= now,
            Event.start_date <= now + timedelta(days=EVENT_HORIZON_DAYS),
            Event.status != EventStatus.CANCELLED.value,
            Event.id.not_in(registered),
        ),
    )).scalars().all()
    return rank_events(
        [
            e.as_dict() for e in events
            if can_access_tier(member.tier, e.tier_required, member.role)
        ],
        gift, now,
    )


async def _teachings(db: AsyncSession, member: Member, gift, season) -> list[dict]:
    viewed = select(TeachingProgress.teaching_id).where(
        TeachingProgress.member_id == member.id,
    )
    teachings = (await db.execute(
        select(Teaching).where(
            Teaching.is_published.is_(True), Teaching.id.not_in(viewed),
        ),
    )).scalars().all()
    return rank_teachings(
        [
            t.as_dict() for t in teachings
            if can_access_tier(member.tier, t.tier_required, member.role)
        ],
        gift, season,
    )


async def _prophecies(db: AsyncSession, member: Member) -> list[dict]:
    rows = (await db.execute(
        select(Prophecy)
        .where(Prophecy.is_published.is_(True))
        .order_by(Prophecy.created_at.desc())
        .limit(TOP_PROPHECIES * 3),
    )).scalars().all()
    return [
        p.as_dict() for p in rows
        if can_access_tier(member.tier, p.tier_required, member.role)
    ][:TOP_PROPHECIES]


async def recommend(
    db: AsyncSession, llm: ResilientAnthropicClient, member: Member, kind: str = "all",
) -> dict:
    if kind not in TYPES:
        raise ValidationFailedError(f"Unknown recommendation type: {kind}", "type")
    now = utcnow()
    profile = member.profile
    gift = profile.primary_gift if profile else None
    season = profile.current_season if profile else None

    result: dict = {}
    if kind in ("all", "groups"):
        result["groups"] = await _groups(db, member, gift, season)
    if kind in ("all", "events"):
        result["events"] = await _events(db, member, gift, now)
    if kind in ("all", "content"):
        result["teachings"] = await _teachings(db, member, gift, season)
        result["prophecies"] = await _prophecies(db, member)

    result["summary"] = await _summary(llm, member, gift, season, result)
    result["profile"] = {"primary_gift": gift, "current_season": season}
    return result


async def _summary(llm, member: Member, gift, season, recommendations: dict) -> str:
    try:
        completion = await llm.complete(
            system=SUMMARY_SYSTEM_PROMPT,
            messages=[{
                "role": "user",
                "content": summary_prompt(member.first_name, gift, season, recommendations),
            }],
            max_tokens=200,
        )
    except AnthropicAPIError as e:
        logger.warning(
            f"Recommendation summary unavailable: {e.message}",
            extra={"member_id": str(member.id)},
        )
        return ""
    return completion.text.strip()
