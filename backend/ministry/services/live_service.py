"""Live Service Viewer — current/next stream lookup and attendance tracking.

Invariants:
    - Without an id: the service currently `live`, else the next `scheduled` one
    - current_attendees counts attendance rows with left_at NULL, only while live
    - join re-opens an existing attendance row (left_at cleared)
"""

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.dates import utcnow
from ministry.core.domain_types import LiveServiceStatus
from ministry.core.errors import ResourceNotFoundError, ValidationFailedError
from ministry.models.live import LiveAttendance, LiveService
from ministry.models.member import Member

ACTIONS = ("join", "leave")


async def _current_or_next(db: AsyncSession) -> LiveService | None:
    live = await db.scalar(
        select(LiveService)
        .where(LiveService.status == LiveServiceStatus.LIVE.value)
        .order_by(LiveService.actual_start.desc())
        .limit(1),
    )
    if live is not None:
        return live
    return await db.scalar(
        select(LiveService)
        .where(
            LiveService.status == LiveServiceStatus.SCHEDULED.value,
            LiveService.scheduled_start >= utcnow(),
        )
        .order_by(LiveService.scheduled_start)
        .limit(1),
    )


async def _attendance(
    db: AsyncSession, service_id: uuid.UUID, member_id: uuid.UUID,
) -> LiveAttendance | None:
    return await db.scalar(
        select(LiveAttendance).where(
            LiveAttendance.service_id == service_id,
            LiveAttendance.member_id == member_id,
        ),
    )


async def get_service(
    db: AsyncSession, member: Member | None, service_id: uuid.UUID | None = None,
) -> dict:
    if service_id is not None:
        service = await db.get(LiveService, service_id)
        if service is None:
            raise ResourceNotFoundError("LiveService", str(service_id))
    else:
        service = await _current_or_next(db)
    if service is None:
        return {"service": None}

    payload = service.as_dict()
    if service.status == LiveServiceStatus.LIVE.value:
        payload["current_attendees"] = await db.scalar(
            select(func.count()).select_from(LiveAttendance).where(
                LiveAttendance.service_id == service.id,
                LiveAttendance.left_at.is_(None),
            ),
        ) or 0
    if member is not None:
        attendance = await _attendance(db, service.id, member.id)
        payload["user_attending"] = bool(attendance and attendance.left_at is None)
    return {"service": payload}


async def update_attendance(
    db: AsyncSession, member: Member, service_id: uuid.UUID, action: str,
) -> dict:
    if action not in ACTIONS:
        raise ValidationFailedError(f"Unknown action: {action}", "action")
    service = await db.get(LiveService, service_id)
    if service is None:
        raise ResourceNotFoundError("LiveService", str(service_id))

    attendance = await _attendance(db, service_id, member.id)
    if action == "join":
        if attendance is None:
            db.add(LiveAttendance(service_id=service_id, member_id=member.id))
        else:
            attendance.joined_at = utcnow()
            attendance.left_at = None
    elif attendance is not None:
        attendance.left_at = utcnow()
    await db.commit()
    return {"success": True, "action": action, "service_id": service_id}
