"""AI Routes — pastoral chat and personalised recommendations.

Invariants:
    - Every endpoint requires an authenticated member
    - LLM failures on chat surface as 503 (AnthropicAPIError)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.api.dependencies import get_anthropic_client, get_current_member
from ministry.infrastructure.anthropic_client import ResilientAnthropicClient
from ministry.infrastructure.database import get_db
from ministry.models.member import Member
from ministry.schemas.ai import ChatRequest
from ministry.services import recommendation_service
from ministry.services.pastoral_chat import PastoralChat

router = APIRouter(prefix="/api/v1/ai", tags=["ai"])


@router.post("/prophet-lorenzo")
async def chat(
    body: ChatRequest,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
    llm: ResilientAnthropicClient = Depends(get_anthropic_client),
):
    return await PastoralChat(db, llm).reply(member, body.message, body.conversation_id)


@router.get("/prophet-lorenzo/conversations")
async def list_conversations(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
    llm: ResilientAnthropicClient = Depends(get_anthropic_client),
):
    return {"conversations": await PastoralChat(db, llm).conversations(member)}


@router.get("/prophet-lorenzo/conversations/{conversation_id}")
async def get_conversation(
    conversation_id: UUID,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
    llm: ResilientAnthropicClient = Depends(get_anthropic_client),
):
    return await PastoralChat(db, llm).conversation_detail(member, conversation_id)


@router.get("/recommendations")
async def recommendations(
    type: str = Query("all", pattern="^(all|groups|events|content)$"),
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
    llm: ResilientAnthropicClient = Depends(get_anthropic_client),
):
    return await recommendation_service.recommend(db, llm, member, type)
