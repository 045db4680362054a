"""Workflow Runner — evaluates a workflow's trigger and performs its action per member.

Invariants:
    - One WorkflowExecution row per matched member (sent, or failed + error)
    - A delivery failure for one member never stops the rest of the run
    - last_run stamped and total_sent incremented after every run
    - run_all: one workflow's failure (domain or unexpected) is rolled back and
      recorded in its result; the rest still run
    - run_all reads ids and names up front: a rollback expires loaded rows

Design Decisions:
    - Class holding db + provider clients, like a request-scoped runner: the
      HTTP run endpoint and the cron endpoint share one code path
    - Only the data a trigger needs is loaded (activity timestamps for
      `inactive`, answered prayers for `prayer_answered`)
"""

import logging
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.dates import utcnow
from ministry.core.domain_types import DeliveryStatus, WorkflowAction, WorkflowTrigger
from ministry.core.errors import (
    BusinessRuleError, MinistryError, ResourceNotFoundError, SmsDeliveryError,
)
from ministry.core.phone import normalize_e164
from ministry.core.workflow_triggers import (
    REENGAGE_COOLDOWN_DAYS, render_template, select_members, text_to_html,
)
from ministry.infrastructure.email_client import EmailMessage, ResendEmailClient
from ministry.infrastructure.sms_client import TwilioSmsClient
from ministry.models.activity import MemberActivity
from ministry.models.member import Member
from ministry.models.prayer import PrayerRequest
from ministry.models.sms import SmsMessage
from ministry.models.workflow import Workflow, WorkflowExecution
from ministry.services.member_service import create_notification

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "A message from your ministry family"


def _member_dict(m: Member) -> dict:
    return {
        "id": m.id,
        "first_name": m.first_name,
        "last_name": m.last_name,
        "email": m.email,
        "phone": m.phone,
        "date_of_birth": m.date_of_birth,
        "created_at": m.created_at,
    }


class WorkflowRunner:
    """Runs workflows against the current member base."""

    def __init__(
        self,
        db: AsyncSession,
        email_client: ResendEmailClient,
        sms_client: TwilioSmsClient,
    ):
        self.db = db
        self.email_client = email_client
        self.sms_client = sms_client

    async def run_by_id(self, workflow_id) -> dict:
        workflow = await self.db.get(Workflow, workflow_id)
        if workflow is None:
            raise ResourceNotFoundError("Workflow", str(workflow_id))
        if not workflow.is_active:
            raise BusinessRuleError("Workflow is not active", "WORKFLOW_INACTIVE")
        return await self.run(workflow)

    async def run_all(self) -> dict:
        rows = (await self.db.execute(
            select(Workflow.id, Workflow.name)
            .where(Workflow.is_active.is_(True))
            .order_by(Workflow.created_at),
        )).all()
        results = []
        for workflow_id, name in rows:
            entry = {"workflow_id": workflow_id, "name": name}
            try:
                workflow = await self.db.get(Workflow, workflow_id, populate_existing=True)
                results.append({**entry, **await self.run(workflow)})
            except MinistryError as e:
                await self.db.rollback()
                logger.error(
                    f"Workflow run failed: {e.message}",
                    extra={"workflow_id": str(workflow_id), "error_code": e.code},
                )
                results.append({**entry, "error": e.message})
            except Exception as e:
                await self.db.rollback()
                logger.exception(
                    f"Workflow run crashed: {e}", extra={"workflow_id": str(workflow_id)},
                )
                results.append({**entry, "error": "Unexpected error while running workflow"})
        return {
            "workflows_run": len(results),
            "total_sent": sum(r.get("sent", 0) for r in results),
            "results": results,
        }

    async def run(self, workflow: Workflow) -> dict:
        now = utcnow()
        matched = await self._matched_members(workflow, now)
        sent = failed = 0
        for member in matched:
            error = await self._perform(workflow, member)
            status = DeliveryStatus.FAILED if error else DeliveryStatus.SENT
            self.db.add(WorkflowExecution(
                workflow_id=workflow.id,
                workflow_name=workflow.name,
                member_id=member["id"],
                member_name=f"{member.get('first_name') or ''} {member.get('last_name') or ''}".strip(),
                action_type=workflow.action_type,
                status=status.value,
                error_message=error,
            ))
            if error:
                failed += 1
            else:
                sent += 1

        workflow.last_run = now
        workflow.total_sent = (workflow.total_sent or 0) + sent
        await self.db.commit()
        logger.info(
            f"Workflow '{workflow.name}' ran: {sent} sent, {failed} failed",
            extra={"workflow_id": str(workflow.id), "sent": sent, "failed": failed},
        )
        return {"sent": sent, "failed": failed, "total": len(matched)}

    # -- Selection -------------------------------------------------------------

    async def _matched_members(self, workflow: Workflow, now) -> list[dict]:
        trigger = workflow.trigger_type
        if trigger == WorkflowTrigger.PRAYER_ANSWERED.value:
            return select_members(
                trigger, workflow.trigger_config, now=now, members=[],
                answered_prayers=await self._answered_prayers(now),
            )

        members = [
            _member_dict(m) for m in (await self.db.execute(select(Member))).scalars().all()
        ]
        last_activity = None
        recently_contacted = None
        if trigger == WorkflowTrigger.INACTIVE.value:
            rows = await self.db.execute(
                select(MemberActivity.member_id, func.max(MemberActivity.created_at))
                .group_by(MemberActivity.member_id),
            )
            last_activity = {str(r[0]): r[1] for r in rows.all()}
            contacted = await self.db.execute(
                select(WorkflowExecution.member_id).where(
                    WorkflowExecution.workflow_id == workflow.id,
                    WorkflowExecution.executed_at
                    >= now - timedelta(days=REENGAGE_COOLDOWN_DAYS),
                ),
            )
            recently_contacted = {str(r[0]) for r in contacted.all() if r[0]}
        return select_members(
            trigger, workflow.trigger_config, now=now, members=members,
            last_activity=last_activity, recently_contacted=recently_contacted,
        )

    async def _answered_prayers(self, now) -> list[dict]:
        rows = await self.db.execute(
            select(PrayerRequest, Member)
            .join(Member, Member.id == PrayerRequest.member_id)
            .where(
                PrayerRequest.is_answered.is_(True),
                PrayerRequest.answered_at >= now - timedelta(hours=24),
            ),
        )
        return [
            {"answered_at": prayer.answered_at, "member": _member_dict(member)}
            for prayer, member in rows.all()
        ]

    # -- Actions ---------------------------------------------------------------

    async def _perform(self, workflow: Workflow, member: dict) -> str | None:
        """Run the action for one member. Returns an error message or None."""
        config = workflow.action_config or {}
        message = render_template(config.get("message") or "", member)
        subject = render_template(config.get("subject") or DEFAULT_SUBJECT, member)
        try:
            match workflow.action_type:
                case WorkflowAction.EMAIL.value:
                    await self.email_client.send(EmailMessage(
                        to=member["email"], subject=subject,
                        html=text_to_html(message), text=message,
                    ))
                case WorkflowAction.NOTIFICATION.value:
                    create_notification(
                        self.db, member["id"], title=subject, message=message,
                        type="workflow",
                    )
                case WorkflowAction.SMS.value:
                    await self._send_sms(member, message)
                case other:
                    return f"Unknown action type: {other}"
        except MinistryError as e:
            logger.warning(
                f"Workflow action failed: {e.message}",
                extra={"workflow_id": str(workflow.id), "member_id": str(member["id"])},
            )
            return e.message
        return None

    async def _send_sms(self, member: dict, body: str) -> None:
        to = normalize_e164(member.get("phone"))
        if to is None:
            raise SmsDeliveryError("Member has no valid phone number")
        try:
            receipt = await self.sms_client.send(to, body)
        except SmsDeliveryError as e:
            self.db.add(SmsMessage(
                to_number=to, body=body, status=DeliveryStatus.FAILED.value,
                error_message=e.message,
            ))
            raise
        self.db.add(SmsMessage(
            to_number=to, from_number=self.sms_client.from_number, body=body,
            status=receipt.status, twilio_sid=receipt.sid,
        ))
