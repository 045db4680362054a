"""Gamification Routes — member points/level/badges summary and action awards."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import get_current_member
from ministry.infrastructure.database import get_db
from ministry.models.member import Member
from ministry.schemas.member import GamificationAction
from ministry.services import gamification_service

router = APIRouter(prefix="/api/v1/member/gamification", tags=["gamification"])


@router.get("")
async def get_gamification(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await gamification_service.get_summary(db, member)


@router.post("")
async def award_points(
    body: GamificationAction,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await gamification_service.award_action(db, member, body.action, body.points)
