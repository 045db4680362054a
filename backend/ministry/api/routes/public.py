"""Public Routes — unauthenticated endpoints behind the marketing site.

Invariants:
    - No endpoint here requires a token
    - Partner tier table is served from core/access.PARTNER_TIERS (single source)
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import get_email_client
from ministry.core.access import PARTNER_TIERS
from ministry.infrastructure.database import get_db
from ministry.infrastructure.email_client import ResendEmailClient
from ministry.schemas.public import ContactCreate
from ministry.services import public_service

router = APIRouter(prefix="/api/v1/public", tags=["public"])


@router.get("/events")
async def list_events(
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    return {"events": await public_service.upcoming_events(db, limit)}


@router.post("/contact", status_code=status.HTTP_201_CREATED)
async def submit_contact(
    body: ContactCreate,
    db: AsyncSession = Depends(get_db),
    email_client: ResendEmailClient = Depends(get_email_client),
):
    return await public_service.submit_contact(db, email_client, body)


@router.get("/gallery")
async def list_gallery(db: AsyncSession = Depends(get_db)):
    return {"albums": await public_service.list_albums(db)}


@router.get("/gallery/{slug}")
async def get_gallery_album(slug: str, db: AsyncSession = Depends(get_db)):
    return {"album": await public_service.get_album(db, slug)}


@router.get("/prophecies")
async def list_prophecies(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return {"prophecies": await public_service.public_prophecies(db, limit)}


@router.get("/partner-tiers")
async def partner_tiers():
    return {"tiers": list(PARTNER_TIERS)}
