"""Public Service — events, contact form, gallery, and prophecy hub for visitors.

Invariants:
    - Only free-tier, non-cancelled, future events are public
    - Contact submissions are stored before the inbox notice is attempted;
      a failed notice never fails the submission
    - Only published albums/prophecies are visible
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.config import get_settings
from ministry.core.dates import utcnow
from ministry.core.domain_types import EventStatus, Tier
from ministry.core.email_templates import render_contact_notice
from ministry.core.errors import MinistryError, ResourceNotFoundError
from ministry.infrastructure.email_client import EmailMessage, ResendEmailClient
from ministry.models.contact import ContactSubmission
from ministry.models.content import Prophecy
from ministry.models.event import Event
from ministry.models.gallery import GalleryAlbum, GalleryPhoto
from ministry.schemas.public import ContactCreate

logger = logging.getLogger(__name__)


async def upcoming_events(db: AsyncSession, limit: int = 10) -> list[dict]:
    rows = await db.execute(
        select(Event)
        .where(
            Event.start_date >= utcnow(),
            Event.status != EventStatus.CANCELLED.value,
            Event.tier_required == Tier.FREE.value,
        )
        .order_by(Event.start_date)
        .limit(limit),
    )
    return [e.as_dict() for e in rows.scalars().all()]


async def submit_contact(
    db: AsyncSession, email_client: ResendEmailClient, body: ContactCreate,
) -> dict:
    submission = ContactSubmission(
        name=body.name,
        email=body.email,
        phone=body.phone,
        subject=body.subject,
        message=body.message,
    )
    db.add(submission)
    await db.commit()

    settings = get_settings()
    try:
        await email_client.send(EmailMessage(
            to=settings.email_inbox,
            subject=f"Contact form: {body.subject or body.name}",
            html=render_contact_notice(
                name=body.name, email=body.email, subject=body.subject,
                message=body.message, ministry_name=settings.ministry_name,
                site_url=settings.site_url,
            ),
            reply_to=body.email,
        ))
    except MinistryError as e:
        logger.warning(f"Contact notice not delivered: {e.message}", extra={
            "error_code": e.code,
        })
    return {"success": True, "id": submission.id}


async def list_albums(db: AsyncSession) -> list[dict]:
    photo_count = (
        select(func.count(GalleryPhoto.id))
        .where(GalleryPhoto.album_id == GalleryAlbum.id)
        .scalar_subquery()
    )
    rows = await db.execute(
        select(GalleryAlbum, photo_count)
        .where(GalleryAlbum.is_published.is_(True))
        .order_by(GalleryAlbum.created_at.desc()),
    )
    return [
        {
            "id": album.id,
            "slug": album.slug,
            "title": album.title,
            "description": album.description,
            "cover_url": album.cover_url,
            "photo_count": count or 0,
            "created_at": album.created_at,
        }
        for album, count in rows.all()
    ]


async def get_album(db: AsyncSession, slug: str) -> dict:
    album = await db.scalar(
        select(GalleryAlbum).where(
            GalleryAlbum.slug == slug, GalleryAlbum.is_published.is_(True),
        ),
    )
    if album is None:
        raise ResourceNotFoundError("GalleryAlbum", slug)
    return {
        "id": album.id,
        "slug": album.slug,
        "title": album.title,
        "description": album.description,
        "cover_url": album.cover_url,
        "photos": [
            {
                "id": p.id,
                "image_url": p.image_url,
                "caption": p.caption,
                "position": p.position,
            }
            for p in album.photos
        ],
    }


async def public_prophecies(db: AsyncSession, limit: int = 20) -> list[dict]:
    rows = await db.execute(
        select(Prophecy)
        .where(
            Prophecy.is_published.is_(True),
            Prophecy.tier_required == Tier.FREE.value,
        )
        .order_by(Prophecy.created_at.desc())
        .limit(limit),
    )
    return [p.as_dict() for p in rows.scalars().all()]
