"""Weekly Newsletter — gathers the week's highlights and emails subscribed members.

Invariants:
    - Recipients: members not opted out of `weekly_newsletter`
    - Stats cover the trailing 7 days; events cover the next 14 days
    - AI summary failures fall back to newsletter_fallback_summary()
    - One EmailSendLog row (campaign_id NULL) per attempted recipient
"""

import logging
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.config import get_settings
from ministry.core.dates import ensure_utc, utcnow
from ministry.core.domain_types import (
    ActivityType, DeliveryStatus, EventStatus, SubscriptionType,
)
from ministry.core.email_templates import (
    newsletter_fallback_summary, render_newsletter_html,
)
from ministry.core.errors import AnthropicAPIError
from ministry.infrastructure.anthropic_client import ResilientAnthropicClient
from ministry.infrastructure.email_client import EmailMessage, ResendEmailClient
from ministry.models.activity import MemberActivity
from ministry.models.content import Prophecy, Teaching
from ministry.models.email import EmailSendLog
from ministry.models.event import Event
from ministry.models.member import Member
from ministry.models.prayer import PrayerRequest
from ministry.services.campaign_service import (
    Recipient, deliver_batched, subscribed_clause,
)

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "You write the opening paragraph of a ministry's weekly newsletter. "
    "Two or three warm, encouraging sentences that mention the numbers given. "
    "Plain text only."
)
EXCERPT_LENGTH = 150
MAX_PROPHECIES = 3
MAX_EVENTS = 3


def _excerpt(text: str | None) -> str:
    text = text or ""
    if len(text) > EXCERPT_LENGTH:
        return text[:EXCERPT_LENGTH] + "..."
    return text


async def _weekly_content(db: AsyncSession, now) -> dict:
    week_ago = now - timedelta(days=7)
    stats = {
        "new_members": await db.scalar(
            select(func.count()).select_from(Member).where(Member.created_at >= week_ago),
        ) or 0,
        "prayers_answered": await db.scalar(
            select(func.count()).select_from(PrayerRequest).where(
                PrayerRequest.is_answered.is_(True),
                PrayerRequest.answered_at >= week_ago,
            ),
        ) or 0,
        "teachings_watched": await db.scalar(
            select(func.count()).select_from(MemberActivity).where(
                MemberActivity.activity_type == ActivityType.TEACHING_VIEWED.value,
                MemberActivity.created_at >= week_ago,
            ),
        ) or 0,
    }
    site = get_settings().site_url.rstrip("/")

    teaching = await db.scalar(
        select(Teaching).where(Teaching.is_published.is_(True))
        .order_by(Teaching.views.desc()).limit(1),
    )
    featured = None
    if teaching is not None:
        featured = {
            "title": teaching.title,
            "speaker": teaching.speaker or "",
            "description": teaching.description or "",
            "url": f"{site}/teachings/{teaching.slug or teaching.id}",
        }

    prophecies = (await db.execute(
        select(Prophecy).where(
            Prophecy.is_published.is_(True), Prophecy.created_at >= week_ago,
        ).order_by(Prophecy.created_at.desc()).limit(MAX_PROPHECIES),
    )).scalars().all()
    events = (await db.execute(
        select(Event).where(
            Event.start_date >= now,
            Event.start_date <= now + timedelta(days=14),
            Event.status != EventStatus.CANCELLED.value,
        ).order_by(Event.start_date).limit(MAX_EVENTS),
    )).scalars().all()

    return {
        "stats": stats,
        "featured_teaching": featured,
        "prophecies": [
            {
                "title": p.title,
                "excerpt": _excerpt(p.content),
                "url": f"{site}/prophecy/{p.slug or p.id}",
            }
            for p in prophecies
        ],
        "events": [
            {
                "title": e.title,
                "date": ensure_utc(e.start_date).strftime("%A, %B %d"),
                "url": f"{site}/events/{e.slug or e.id}",
            }
            for e in events
        ],
    }


async def _summary(llm: ResilientAnthropicClient, content: dict) -> str:
    stats = content["stats"]
    prompt = (
        f"New members this week: {stats['new_members']}\n"
        f"Prayers answered: {stats['prayers_answered']}\n"
        f"Teachings watched: {stats['teachings_watched']}\n"
        f"Upcoming events: {', '.join(e['title'] for e in content['events']) or 'none'}"
    )
    try:
        completion = await llm.complete(
            system=SUMMARY_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=300,
        )
    except AnthropicAPIError as e:
        logger.warning(f"Newsletter summary unavailable: {e.message}")
        return newsletter_fallback_summary(stats)
    return completion.text.strip() or newsletter_fallback_summary(stats)


async def send_weekly_newsletter(
    db: AsyncSession,
    llm: ResilientAnthropicClient,
    email_client: ResendEmailClient,
) -> dict:
    settings = get_settings()
    now = utcnow()
    members = (await db.execute(
        select(Member).where(subscribed_clause(SubscriptionType.WEEKLY_NEWSLETTER.value)),
    )).scalars().all()
    recipients = [
        Recipient(member_id=m.id, email=m.email, first_name=m.first_name or "")
        for m in members if m.email
    ]
    if not recipients:
        return {"success": True, "sent": 0, "failed": 0, "total": 0}

    content = await _weekly_content(db, now)
    summary = await _summary(llm, content)
    week_date = now.strftime("%B %d, %Y")
    subject = f"{settings.ministry_name} Weekly: {week_date}"

    outcomes = await deliver_batched(
        email_client, recipients,
        lambda r: EmailMessage(
            to=r.email,
            subject=subject,
            html=render_newsletter_html(
                first_name=r.first_name,
                week_date=week_date,
                summary=summary,
                ministry_name=settings.ministry_name,
                site_url=settings.site_url,
                **content,
            ),
        ),
    )
    for outcome in outcomes:
        db.add(EmailSendLog(
            member_id=outcome.recipient.member_id,
            email=outcome.recipient.email,
            status=(DeliveryStatus.FAILED if outcome.error else DeliveryStatus.SENT).value,
            provider_id=outcome.provider_id,
            error_message=outcome.error,
        ))
    await db.commit()

    sent = sum(1 for o in outcomes if not o.error)
    logger.info(
        f"Weekly newsletter sent to {sent}/{len(outcomes)} members",
        extra={"recipients": len(outcomes), "sent": sent, "failed": len(outcomes) - sent},
    )
    return {
        "success": True,
        "sent": sent,
        "failed": len(outcomes) - sent,
        "total": len(outcomes),
        "stats": content["stats"],
    }
