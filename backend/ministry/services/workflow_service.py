"""Workflow admin CRUD — list, create, edit/toggle, and recent execution log."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.core.errors import ResourceNotFoundError
from ministry.models.member import Member
from ministry.models.workflow import Workflow, WorkflowExecution
from ministry.schemas.admin import WorkflowCreate, WorkflowUpdate

RECENT_EXECUTIONS = 50


async def list_workflows(db: AsyncSession) -> dict:
    workflows = (await db.execute(
        select(Workflow).order_by(Workflow.created_at.desc()),
    )).scalars().all()
    executions = (await db.execute(
        select(WorkflowExecution)
        .order_by(WorkflowExecution.executed_at.desc())
        .limit(RECENT_EXECUTIONS),
    )).scalars().all()
    return {
        "workflows": [w.as_dict() for w in workflows],
        "recent_executions": [
            {
                "id": e.id,
                "workflow_id": e.workflow_id,
                "workflow_name": e.workflow_name,
                "member_name": e.member_name,
                "action_type": e.action_type,
                "status": e.status,
                "error_message": e.error_message,
                "executed_at": e.executed_at,
            }
            for e in executions
        ],
    }


async def create_workflow(db: AsyncSession, creator: Member, body: WorkflowCreate) -> dict:
    workflow = Workflow(
        name=body.name,
        description=body.description,
        trigger_type=body.trigger_type.value,
        trigger_config=body.trigger_config.model_dump(exclude_none=True),
        action_type=body.action_type.value,
        action_config=body.action_config,
        is_active=body.is_active,
        created_by=creator.id,
    )
    db.add(workflow)
    await db.commit()
    return workflow.as_dict()


async def update_workflow(
    db: AsyncSession, workflow_id: uuid.UUID, body: WorkflowUpdate,
) -> dict:
    workflow = await db.get(Workflow, workflow_id)
    if workflow is None:
        raise ResourceNotFoundError("Workflow", str(workflow_id))
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(workflow, field, value)
    await db.commit()
    return workflow.as_dict()
