"""Workflow Routes — admin CRUD, manual run, and the polling cron entry point.

Invariants:
    - Admin endpoints require staff+; the cron endpoint requires the cron secret
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import (
    get_email_client, get_sms_client, require_staff, verify_cron_secret,
)
from ministry.infrastructure.database import get_db
from ministry.infrastructure.email_client import ResendEmailClient
from ministry.infrastructure.sms_client import TwilioSmsClient
from ministry.models.member import Member
from ministry.schemas.admin import WorkflowCreate, WorkflowUpdate
from ministry.services import workflow_service
from ministry.services.workflow_runner import WorkflowRunner

router = APIRouter(prefix="/api/v1", tags=["workflows"])


@router.get("/admin/workflows")
async def list_workflows(
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await workflow_service.list_workflows(db)


@router.post("/admin/workflows", status_code=status.HTTP_201_CREATED)
async def create_workflow(
    body: WorkflowCreate,
    staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await workflow_service.create_workflow(db, staff, body)


@router.patch("/admin/workflows/{workflow_id}")
async def update_workflow(
    workflow_id: UUID,
    body: WorkflowUpdate,
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    return await workflow_service.update_workflow(db, workflow_id, body)


@router.post("/admin/workflows/{workflow_id}/run")
async def run_workflow(
    workflow_id: UUID,
    _staff: Member = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    email_client: ResendEmailClient = Depends(get_email_client),
    sms_client: TwilioSmsClient = Depends(get_sms_client),
):
    runner = WorkflowRunner(db, email_client, sms_client)
    return await runner.run_by_id(workflow_id)


@router.get("/cron/workflows", dependencies=[Depends(verify_cron_secret)])
async def cron_workflows(
    db: AsyncSession = Depends(get_db),
    email_client: ResendEmailClient = Depends(get_email_client),
    sms_client: TwilioSmsClient = Depends(get_sms_client),
):
    runner = WorkflowRunner(db, email_client, sms_client)
    return await runner.run_all()
