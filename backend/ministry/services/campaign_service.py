"""Email Campaign Service — campaign CRUD, audience resolution, batched sending, AI drafts.

Invariants:
    - A campaign in status `sent` is never sent again (400)
    - Test sends go only to test_email with a "[TEST] " subject and do not change status
    - Recipients resolved per target_audience; none → 400 before any state change
    - Status: draft -> sending -> sent (any success) | failed (all failed)
    - One EmailSendLog row per attempted recipient, written even if delivery is
      interrupted; a campaign never stays in `sending` after send() returns or raises
    - Any per-recipient exception becomes a failed outcome, never an aborted batch

Design Decisions:
    - Batches of email_batch_size sent concurrently (asyncio.gather), with
      email_batch_delay_seconds between batches to stay under provider rate limits
    - Subscriptions are opt-out: a member is subscribed unless a row says otherwise
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import and_, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.config import get_settings
from ministry.core.dates import utcnow
from ministry.core.domain_types import CampaignStatus, DeliveryStatus
from ministry.core.email_templates import personalise, render_campaign_html
from ministry.core.errors import (
    AnthropicAPIError, BusinessRuleError, MinistryError, ResourceNotFoundError,
)
from ministry.infrastructure.anthropic_client import ResilientAnthropicClient
from ministry.infrastructure.email_client import EmailMessage, ResendEmailClient
from ministry.models.email import EmailCampaign, EmailSendLog
from ministry.models.member import EmailSubscription, Member
from ministry.schemas.admin import CampaignCreate, CampaignDraftRequest

logger = logging.getLogger(__name__)

DRAFT_SYSTEM_PROMPT = (
    "You write warm, pastoral email campaigns for a Christian ministry. "
    "Respond with JSON only: {\"subject\": \"...\", \"body\": \"...\"}. "
    "The body is plain text with blank lines between paragraphs and may use "
    "{{firstName}} to greet the reader."
)


@dataclass(frozen=True)
class Recipient:
    member_id: uuid.UUID | None
    email: str
    first_name: str


@dataclass(frozen=True)
class SendOutcome:
    recipient: Recipient
    provider_id: str | None = None
    error: str | None = None


def subscribed_clause(subscription_type: str):
    """Members who have not opted out of subscription_type."""
    return ~exists().where(and_(
        EmailSubscription.member_id == Member.id,
        EmailSubscription.subscription_type == subscription_type,
        EmailSubscription.is_subscribed.is_(False),
    ))


async def resolve_recipients(db: AsyncSession, audience: dict | None) -> list[Recipient]:
    audience = audience or {"type": "all"}
    query = select(Member).order_by(Member.created_at)
    match audience.get("type", "all"):
        case "tiers":
            query = query.where(Member.tier.in_(audience.get("tiers") or []))
        case "subscription_type":
            query = query.where(subscribed_clause(audience.get("subscription_type") or ""))
        case "member_ids":
            ids = [uuid.UUID(str(i)) for i in audience.get("member_ids") or []]
            query = query.where(Member.id.in_(ids))
    members = (await db.execute(query)).scalars().all()
    return [
        Recipient(member_id=m.id, email=m.email, first_name=m.first_name or "")
        for m in members if m.email
    ]


async def deliver_batched(
    email_client: ResendEmailClient,
    recipients: list[Recipient],
    build,
    outcomes: list[SendOutcome] | None = None,
) -> list[SendOutcome]:
    """Send build(recipient) -> EmailMessage to everyone, batch by batch.

    Outcomes are appended to `outcomes` as each batch finishes, so a caller that
    passes its own list still sees the completed batches if the run is interrupted.
    """
    settings = get_settings()
    size = max(1, settings.email_batch_size)

    async def send_one(recipient: Recipient) -> SendOutcome:
        try:
            provider_id = await email_client.send(build(recipient))
        except MinistryError as e:
            return SendOutcome(recipient, error=e.message)
        except Exception as e:
            logger.exception(f"Unexpected email send failure: {e}")
            return SendOutcome(recipient, error=f"Unexpected error: {type(e).__name__}")
        return SendOutcome(recipient, provider_id=provider_id)

    if outcomes is None:
        outcomes = []
    for start in range(0, len(recipients), size):
        if start:
            await asyncio.sleep(settings.email_batch_delay_seconds)
        batch = recipients[start:start + size]
        outcomes.extend(await asyncio.gather(*(send_one(r) for r in batch)))
    return outcomes


class CampaignService:
    """Campaign operations for the admin communications screen."""

    def __init__(self, db: AsyncSession, email_client: ResendEmailClient):
        self.db = db
        self.email_client = email_client

    async def list_campaigns(self) -> list[dict]:
        rows = await self.db.execute(
            select(EmailCampaign).order_by(EmailCampaign.created_at.desc()),
        )
        return [c.as_dict() for c in rows.scalars().all()]

    async def get_campaign(self, campaign_id: uuid.UUID) -> EmailCampaign:
        campaign = await self.db.get(EmailCampaign, campaign_id)
        if campaign is None:
            raise ResourceNotFoundError("EmailCampaign", str(campaign_id))
        return campaign

    async def create(self, creator: Member, body: CampaignCreate) -> dict:
        campaign = EmailCampaign(
            name=body.name,
            subject=body.subject,
            content=body.content.model_dump(),
            html=body.html,
            target_audience=body.target_audience.model_dump(mode="json"),
            status=CampaignStatus.DRAFT.value,
            created_by=creator.id,
        )
        self.db.add(campaign)
        await self.db.commit()
        return campaign.as_dict()

    def _html(self, campaign: EmailCampaign) -> str:
        if campaign.html:
            return campaign.html
        settings = get_settings()
        return render_campaign_html(
            campaign.content, settings.ministry_name, settings.site_url,
        )

    async def _record_outcomes(self, campaign: EmailCampaign, outcomes: list[SendOutcome]) -> None:
        """Write send logs and the final status; runs even when delivery was interrupted."""
        for outcome in outcomes:
            self.db.add(EmailSendLog(
                campaign_id=campaign.id,
                member_id=outcome.recipient.member_id,
                email=outcome.recipient.email,
                status=(DeliveryStatus.FAILED if outcome.error else DeliveryStatus.SENT).value,
                provider_id=outcome.provider_id,
                error_message=outcome.error,
            ))
        sent = sum(1 for o in outcomes if not o.error)
        campaign.sent_count = sent
        campaign.failed_count = len(outcomes) - sent
        campaign.status = (
            CampaignStatus.FAILED if sent == 0 else CampaignStatus.SENT
        ).value
        campaign.sent_at = utcnow()
        await self.db.commit()

    async def send(self, campaign_id: uuid.UUID, test_email: str | None = None) -> dict:
        campaign = await self.get_campaign(campaign_id)
        html = self._html(campaign)

        if test_email:
            await self.email_client.send(EmailMessage(
                to=test_email,
                subject=f"[TEST] {campaign.subject}",
                html=personalise(html, "Friend", test_email),
            ))
            logger.info("Test campaign sent", extra={"campaign_id": str(campaign.id)})
            return {"success": True, "test": True, "sent_to": test_email}

        if campaign.status == CampaignStatus.SENT.value:
            raise BusinessRuleError("Campaign has already been sent", "CAMPAIGN_ALREADY_SENT")
        recipients = await resolve_recipients(self.db, campaign.target_audience)
        if not recipients:
            raise BusinessRuleError("No recipients match this audience", "NO_RECIPIENTS")

        campaign.status = CampaignStatus.SENDING.value
        campaign.total_recipients = len(recipients)
        await self.db.commit()

        outcomes: list[SendOutcome] = []
        try:
            await deliver_batched(
                self.email_client, recipients,
                lambda r: EmailMessage(
                    to=r.email,
                    subject=personalise(campaign.subject, r.first_name, r.email, html=False),
                    html=personalise(html, r.first_name, r.email),
                ),
                outcomes=outcomes,
            )
        finally:
            await self._record_outcomes(campaign, outcomes)
        sent = campaign.sent_count
        failed = campaign.failed_count

        logger.info(
            f"Campaign sent: {sent} delivered, {failed} failed",
            extra={
                "campaign_id": str(campaign.id),
                "recipients": len(recipients), "sent": sent, "failed": failed,
            },
        )
        return {
            "success": sent > 0,
            "status": campaign.status,
            "total": len(recipients),
            "sent": sent,
            "failed": failed,
        }


async def draft_with_ai(
    llm: ResilientAnthropicClient, body: CampaignDraftRequest,
) -> dict:
    """LLM-drafted subject + body. Provider errors propagate (503)."""
    prompt = f"Topic: {body.topic}\nTone: {body.tone}"
    if body.audience:
        prompt += f"\nAudience: {body.audience}"
    completion = await llm.complete(
        system=DRAFT_SYSTEM_PROMPT,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=1000,
    )
    return {**_parse_draft(completion.text), "tokens_used": (
        completion.input_tokens + completion.output_tokens
    )}


def _parse_draft(text: str) -> dict:
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        raise AnthropicAPIError("Draft response was not JSON", "invalid_response")
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        raise AnthropicAPIError("Draft response was not JSON", "invalid_response")
    return {
        "subject": str(data.get("subject") or "").strip(),
        "body": str(data.get("body") or "").strip(),
    }
