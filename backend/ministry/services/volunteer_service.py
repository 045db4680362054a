"""Volunteer Scheduler Service — overview, manual scheduling, and auto-scheduling.

Invariants:
    - Overview covers the next UPCOMING_EVENT_LIMIT upcoming events
    - A member is scheduled once per event (409 on repeat)
    - Auto-schedule never exceeds the event's remaining gap
    - Every created schedule sends the volunteer an in-app notification

Design Decisions:
    - Auto-schedule considers every member with availability on the event's
      weekday, team or not; ranking (core/volunteer_matching.rank_candidates)
      prefers team members, leads, then whoever has served least
"""

import logging
import uuid
from collections import Counter

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.dates import ensure_utc, utcnow, weekday_name
from ministry.core.domain_types import EventStatus, ScheduleStatus
from ministry.core.errors import (
    ConflictError, ResourceNotFoundError, ValidationFailedError,
)
from ministry.core.volunteer_matching import (
    DEFAULT_POSITION, DEFAULT_POSITIONS_NEEDED, availability_days,
    event_suggestions, rank_candidates, team_stats,
)
from ministry.models.event import Event
from ministry.models.member import Member
from ministry.models.volunteer import (
    VolunteerAvailability, VolunteerSchedule, VolunteerTeam,
)
from ministry.schemas.admin import SchedulerAction
from ministry.services.member_service import create_notification

logger = logging.getLogger(__name__)

UPCOMING_EVENT_LIMIT = 10


def _schedule_dict(s: VolunteerSchedule) -> dict:
    return {
        "id": s.id,
        "event_id": s.event_id,
        "team_id": s.team_id,
        "member_id": s.member_id,
        "position": s.position,
        "status": s.status,
    }


async def _teams(db: AsyncSession) -> list[dict]:
    teams = (await db.execute(
        select(VolunteerTeam).order_by(VolunteerTeam.name),
    )).scalars().all()
    member_ids = {tm.member_id for t in teams for tm in t.members}
    names: dict[uuid.UUID, str] = {}
    if member_ids:
        rows = await db.execute(
            select(Member).where(Member.id.in_(member_ids)),
        )
        names = {m.id: m.full_name for m in rows.scalars().all()}
    return [
        {
            "id": t.id,
            "name": t.name,
            "description": t.description,
            "required_count": t.required_count,
            "members": [
                {
                    "member_id": tm.member_id,
                    "role": tm.role,
                    "name": names.get(tm.member_id, ""),
                }
                for tm in t.members
            ],
        }
        for t in teams
    ]


async def _availability(db: AsyncSession) -> dict[str, set[str]]:
    rows = (await db.execute(select(VolunteerAvailability))).scalars().all()
    return availability_days([
        {
            "member_id": r.member_id,
            "day_of_week": r.day_of_week,
            "is_available": r.is_available,
        }
        for r in rows
    ])


async def _schedules(db: AsyncSession, event_ids=None) -> list[dict]:
    query = select(VolunteerSchedule)
    if event_ids is not None:
        query = query.where(VolunteerSchedule.event_id.in_(event_ids))
    return [_schedule_dict(s) for s in (await db.execute(query)).scalars().all()]


async def overview(db: AsyncSession) -> dict:
    events = (await db.execute(
        select(Event)
        .where(
            Event.start_date >= utcnow(),
            Event.status != EventStatus.CANCELLED.value,
        )
        .order_by(Event.start_date)
        .limit(UPCOMING_EVENT_LIMIT),
    )).scalars().all()
    teams = await _teams(db)
    days = await _availability(db)
    schedules = await _schedules(db)

    suggestions = [
        event_suggestions(e.as_dict(), teams, schedules, days) for e in events
    ]
    stats = team_stats(teams, schedules, days)
    return {
        "teams": stats,
        "upcoming_events": suggestions,
        "totals": {
            "teams": len(stats),
            "volunteers": len({
                str(m["member_id"]) for t in teams for m in t["members"]
            }),
            "members_with_availability": len(days),
            "open_positions": sum(s["gap_to_fill"] for s in suggestions),
        },
    }


async def _event_or_404(db: AsyncSession, event_id: uuid.UUID) -> Event:
    event = await db.get(Event, event_id)
    if event is None:
        raise ResourceNotFoundError("Event", str(event_id))
    return event


def _notify_scheduled(db: AsyncSession, member_id: uuid.UUID, event: Event, position: str) -> None:
    when = ensure_utc(event.start_date).strftime("%A, %B %d")
    create_notification(
        db, member_id,
        title="You've been scheduled to serve",
        message=f"You're scheduled as {position} for {event.title} on {when}.",
        type="volunteer",
        link="/member/volunteer",
    )


async def schedule_volunteer(db: AsyncSession, body: SchedulerAction) -> dict:
    if body.event_id is None or body.member_id is None:
        raise ValidationFailedError(
            "event_id and member_id are required", "event_id",
        )
    event = await _event_or_404(db, body.event_id)
    if await db.get(Member, body.member_id) is None:
        raise ResourceNotFoundError("Member", str(body.member_id))

    existing = await db.scalar(
        select(VolunteerSchedule.id).where(
            VolunteerSchedule.event_id == body.event_id,
            VolunteerSchedule.member_id == body.member_id,
        ),
    )
    if existing:
        raise ConflictError("Volunteer already scheduled for this event")

    position = body.position or DEFAULT_POSITION
    schedule = VolunteerSchedule(
        event_id=body.event_id,
        member_id=body.member_id,
        team_id=body.team_id,
        position=position,
        status=ScheduleStatus.PENDING.value,
    )
    db.add(schedule)
    _notify_scheduled(db, body.member_id, event, position)
    await db.commit()
    return {"success": True, "schedule": _schedule_dict(schedule)}


async def auto_schedule(db: AsyncSession, body: SchedulerAction) -> dict:
    if body.event_id is None:
        raise ValidationFailedError("event_id is required", "event_id")
    event = await _event_or_404(db, body.event_id)
    day = weekday_name(ensure_utc(event.start_date))

    days = await _availability(db)
    available_ids = sorted(m for m, d in days.items() if day in d)
    event_schedules = await _schedules(db, [event.id])
    already = {str(s["member_id"]) for s in event_schedules}
    positions = event.volunteer_positions_needed or DEFAULT_POSITIONS_NEEDED
    slots = max(0, positions - len(event_schedules))

    teams = await _teams(db)
    team_roles: dict[str, str | None] = {}
    team_of: dict[str, uuid.UUID] = {}
    for team in teams:
        for m in team["members"]:
            key = str(m["member_id"])
            if key not in team_roles or (m["role"] or "").lower() == "lead":
                team_roles[key] = m["role"]
                team_of[key] = team["id"]
    confirmed = Counter(
        str(s["member_id"]) for s in await _schedules(db)
        if s["status"] == ScheduleStatus.CONFIRMED.value
    )

    chosen = rank_candidates(available_ids, already, team_roles, confirmed, slots)
    for member_id in chosen:
        member_uuid = uuid.UUID(member_id)
        db.add(VolunteerSchedule(
            event_id=event.id,
            member_id=member_uuid,
            team_id=team_of.get(member_id),
            position=DEFAULT_POSITION,
            status=ScheduleStatus.PENDING.value,
        ))
        _notify_scheduled(db, member_uuid, event, DEFAULT_POSITION)
    await db.commit()

    logger.info(f"Auto-scheduled {len(chosen)} volunteers for event {event.id}")
    return {
        "success": True,
        "scheduled_count": len(chosen),
        "member_ids": chosen,
        "remaining_gap": slots - len(chosen),
    }


async def handle_action(db: AsyncSession, body: SchedulerAction) -> dict:
    match body.action:
        case "schedule_volunteer":
            return await schedule_volunteer(db, body)
        case "auto_schedule":
            return await auto_schedule(db, body)
        case _:
            raise ValidationFailedError(f"Unknown action: {body.action}", "action")
