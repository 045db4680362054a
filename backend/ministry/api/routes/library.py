"""Library & Resource Routes — merged catalogue, resource listing/download, progress."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import get_current_member
from ministry.core.library import TABS
from ministry.infrastructure.database import get_db
from ministry.models.member import Member
from ministry.schemas.member import TeachingProgressUpdate
from ministry.services import library_service

router = APIRouter(prefix="/api/v1", tags=["library"])

_TAB_PATTERN = "^(" + "|".join(TABS) + ")$"


@router.get("/library")
async def get_library(
    tab: str = Query("all", pattern=_TAB_PATTERN),
    search: str = Query("", max_length=200),
    tag: str = Query("", max_length=100),
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await library_service.get_library(db, member, tab=tab, search=search, tag=tag)


@router.post("/library/progress")
async def save_progress(
    body: TeachingProgressUpdate,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return await library_service.save_progress(
        db, member, body.teaching_id, body.progress_seconds, body.completed,
    )


@router.get("/resources")
async def list_resources(
    type: str | None = Query(None, max_length=30),
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return {
        "resources": await library_service.list_resources(db, member, type),
        "member_tier": member.tier,
    }


@router.get("/resources/{resource_id}")
async def get_resource(
    resource_id: UUID,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    return {"resource": await library_service.get_resource(db, member, resource_id)}
