"""Live Service Routes — current stream lookup and join/leave."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import get_current_member, get_optional_member
from ministry.infrastructure.database import get_db
from ministry.models.member import Member
from ministry.schemas.admin import LiveAction
from ministry.services import live_service

router = APIRouter(prefix="/api/v1/live", tags=["live"])


@router.get("/service")
async def get_service(
    id: UUID | None = Query(None),
    member: Member | None = Depends(get_optional_member),
    db: AsyncSession = Depends(get_db),
):
    return await live_service.get_service(db, member, id)


@router.post("/service")
async def update_attendance(
    body: LiveAction,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await live_service.update_attendance(db, member, body.service_id, body.action)
