"""Member Portal Routes — profile, settings, dashboard, seasons, notifications, activity.

Invariants:
    - Every endpoint acts on the authenticated member only
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import get_current_member
from ministry.infrastructure.database import get_db
from ministry.models.member import Member
from ministry.schemas.member import ActivityCreate, MemberSettingsUpdate, SeasonJoin
from ministry.services import member_service

router = APIRouter(prefix="/api/v1/member", tags=["member"])


@router.get("/me")
async def me(member: Member = Depends(get_current_member)):
    return member_service.profile(member)


@router.patch("/settings")
async def update_settings(
    body: MemberSettingsUpdate,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await member_service.update_settings(db, member, body)


@router.get("/dashboard/stats")
async def dashboard_stats(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await member_service.get_dashboard_stats(db, member)


@router.get("/seasons")
async def list_seasons(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return {"seasons": await member_service.list_seasons(db, member)}


@router.post("/seasons/join", status_code=status.HTTP_201_CREATED)
async def join_season(
    body: SeasonJoin,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await member_service.join_season(db, member, body.season_id)


@router.get("/notifications")
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=100),
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await member_service.list_notifications(db, member, unread_only, limit)


@router.post("/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: UUID,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await member_service.mark_notification_read(db, member, notification_id)


@router.post("/activity", status_code=status.HTTP_201_CREATED)
async def log_activity(
    body: ActivityCreate,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await member_service.log_activity(db, member, body)
