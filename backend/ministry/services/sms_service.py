"""SMS Service — single test sends, bulk sends, and the message log.

Invariants:
    - Numbers normalised to E.164 before sending; invalid → 400 (single) or a
      per-recipient failure (bulk)
    - Every attempt is logged as an outbound SmsMessage, delivered or not
    - Bulk sends are sequential with sms_send_delay_seconds between messages
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.config import get_settings
from ministry.core.domain_types import DeliveryStatus
from ministry.core.errors import SmsDeliveryError, ValidationFailedError
from ministry.core.phone import normalize_e164
from ministry.infrastructure.sms_client import TwilioSmsClient
from ministry.models.member import Member
from ministry.models.sms import SmsMessage

logger = logging.getLogger(__name__)

MESSAGE_LOG_LIMIT = 100


class SmsService:
    def __init__(self, db: AsyncSession, sms_client: TwilioSmsClient):
        self.db = db
        self.sms_client = sms_client

    async def _deliver(self, to: str, body: str, sender: Member) -> dict:
        try:
            receipt = await self.sms_client.send(to, body)
        except SmsDeliveryError as e:
            self.db.add(SmsMessage(
                to_number=to, from_number=self.sms_client.from_number, body=body,
                status=DeliveryStatus.FAILED.value, error_message=e.message,
                sent_by=sender.id,
            ))
            return {"to": to, "success": False, "error": e.message}
        self.db.add(SmsMessage(
            to_number=to, from_number=self.sms_client.from_number, body=body,
            status=receipt.status, twilio_sid=receipt.sid, sent_by=sender.id,
        ))
        return {"to": to, "success": True, "sid": receipt.sid, "status": receipt.status}

    async def send_test(self, sender: Member, raw_to: str, body: str) -> dict:
        to = normalize_e164(raw_to)
        if to is None:
            raise ValidationFailedError(
                "Invalid phone number format. Use E.164, e.g. +15551234567", "to",
            )
        result = await self._deliver(to, body, sender)
        await self.db.commit()
        if not result["success"]:
            raise SmsDeliveryError(result["error"])
        return result

    async def send_bulk(self, sender: Member, recipients: list[str], body: str) -> dict:
        delay = get_settings().sms_send_delay_seconds
        results = []
        for index, raw in enumerate(recipients):
            to = normalize_e164(raw)
            if to is None:
                results.append({"to": raw, "success": False, "error": "Invalid phone number"})
                continue
            if index:
                await asyncio.sleep(delay)
            results.append(await self._deliver(to, body, sender))
        await self.db.commit()

        sent = sum(1 for r in results if r["success"])
        logger.info(
            f"Bulk SMS: {sent}/{len(results)} sent",
            extra={"recipients": len(results), "sent": sent, "failed": len(results) - sent},
        )
        return {
            "total": len(results),
            "sent": sent,
            "failed": len(results) - sent,
            "results": results,
        }

    async def message_log(self, limit: int = MESSAGE_LOG_LIMIT) -> list[dict]:
        rows = await self.db.execute(
            select(SmsMessage).order_by(SmsMessage.created_at.desc()).limit(limit),
        )
        return [m.as_dict() for m in rows.scalars().all()]
