"""Admin Member Routes — search members, change roles (staff+) and tiers (admin)."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import require_admin, require_staff
from ministry.infrastructure.database import get_db
from ministry.models.member import Member
from ministry.schemas.member import RoleUpdate, TierUpdate
from ministry.services import member_service

router = APIRouter(prefix="/api/v1/admin/members", tags=["admin"])


@router.get("")
async def list_members(
    search: str | None = Query(None, max_length=200),
    tier: str | None = Query(None),
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await member_service.list_members(db, search=search, tier=tier)


@router.patch("/{member_id}/role")
async def update_role(
    member_id: UUID,
    body: RoleUpdate,
    caller: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await member_service.change_role(db, caller, member_id, body.role)


@router.patch("/{member_id}/tier")
async def update_tier(
    member_id: UUID,
    body: TierUpdate,
    _admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await member_service.change_tier(db, member_id, body.tier.value)
