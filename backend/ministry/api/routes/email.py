"""Email Routes — campaign management (staff+), AI drafting, and the weekly newsletter cron."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import (
    get_anthropic_client, get_email_client, require_staff, verify_cron_secret,
)
from ministry.infrastructure.anthropic_client import ResilientAnthropicClient
from ministry.infrastructure.database import get_db
from ministry.infrastructure.email_client import ResendEmailClient
from ministry.models.member import Member
from ministry.schemas.admin import CampaignCreate, CampaignDraftRequest, CampaignSend
from ministry.services.campaign_service import CampaignService, draft_with_ai
from ministry.services.newsletter_service import send_weekly_newsletter

router = APIRouter(prefix="/api/v1", tags=["email"])


@router.get("/admin/email/campaigns")
async def list_campaigns(
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    email_client: ResendEmailClient = Depends(get_email_client),
):
    return {"campaigns": await CampaignService(db, email_client).list_campaigns()}


@router.post("/admin/email/campaigns", status_code=status.HTTP_201_CREATED)
async def create_campaign(
    body: CampaignCreate,
    staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    email_client: ResendEmailClient = Depends(get_email_client),
):
    return await CampaignService(db, email_client).create(staff, body)


@router.get("/admin/email/campaigns/{campaign_id}")
async def get_campaign(
    campaign_id: UUID,
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    email_client: ResendEmailClient = Depends(get_email_client),
):
    campaign = await CampaignService(db, email_client).get_campaign(campaign_id)
    return campaign.as_dict()


@router.post("/admin/email/campaigns/{campaign_id}/send")
async def send_campaign(
    campaign_id: UUID,
    body: CampaignSend,
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    email_client: ResendEmailClient = Depends(get_email_client),
):
    service = CampaignService(db, email_client)
    return await service.send(campaign_id, body.test_email)


@router.post("/admin/email/ai-generate")
async def ai_generate(
    body: CampaignDraftRequest,
    _staff: Member = Depends(require_staff),
    llm: ResilientAnthropicClient = Depends(get_anthropic_client),
):
    return await draft_with_ai(llm, body)


@router.get("/cron/weekly-newsletter", dependencies=[Depends(verify_cron_secret)])
async def weekly_newsletter(
    db: AsyncSession = Depends(get_db),
    llm: ResilientAnthropicClient = Depends(get_anthropic_client),
    email_client: ResendEmailClient = Depends(get_email_client),
):
    return await send_weekly_newsletter(db, llm, email_client)
