"""Volunteer Scheduler Routes — overview and scheduling actions (staff+)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import require_staff
from ministry.infrastructure.database import get_db
from ministry.models.member import Member
from ministry.schemas.admin import SchedulerAction
from ministry.services import volunteer_service

router = APIRouter(prefix="/api/v1/admin/volunteer-scheduler", tags=["volunteers"])


@router.get("")
async def scheduler_overview(
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await volunteer_service.overview(db)


@router.post("")
async def scheduler_action(
    body: SchedulerAction,
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await volunteer_service.handle_action(db, body)
