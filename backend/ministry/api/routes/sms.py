"""SMS Routes — test send, bulk send, and message log (staff+)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import get_sms_client, require_staff
from ministry.infrastructure.database import get_db
from ministry.infrastructure.sms_client import TwilioSmsClient
from ministry.models.member import Member
from ministry.schemas.admin import SmsBulk, SmsTest
from ministry.services.sms_service import SmsService

router = APIRouter(prefix="/api/v1/admin/sms", tags=["sms"])


@router.post("/test")
async def send_test(
    body: SmsTest,
    staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    sms_client: TwilioSmsClient = Depends(get_sms_client),
):
    return await SmsService(db, sms_client).send_test(staff, body.to, body.message)


@router.post("/bulk")
async def send_bulk(
    body: SmsBulk,
    staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    sms_client: TwilioSmsClient = Depends(get_sms_client),
):
    return await SmsService(db, sms_client).send_bulk(staff, body.recipients, body.message)


@router.get("/messages")
async def message_log(
    limit: int = Query(100, ge=1, le=500),
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    sms_client: TwilioSmsClient = Depends(get_sms_client),
):
    return {"messages": await SmsService(db, sms_client).message_log(limit)}
