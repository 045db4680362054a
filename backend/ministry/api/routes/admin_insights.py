"""Admin Insight Routes — dashboard analytics (staff+) and giving forecast (admin)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import get_anthropic_client, require_admin, require_staff
from ministry.infrastructure.anthropic_client import ResilientAnthropicClient
from ministry.infrastructure.database import get_db
from ministry.models.member import Member
from ministry.services import analytics_service, giving_service

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/analytics")
async def analytics(
    section: str = Query("all"),
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await analytics_service.get_analytics(db, section)


@router.get("/giving-forecast")
async def giving_forecast(
    months: int = Query(6, ge=1, le=24),
    _admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    llm: ResilientAnthropicClient = Depends(get_anthropic_client),
):
    return await giving_service.get_forecast(db, llm, months)
