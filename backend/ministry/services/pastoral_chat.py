"""Pastoral Chat — AI conversations with the ministry's pastoral persona.

Invariants:
    - A conversation_id must belong to the caller (404 otherwise)
    - The model is called BEFORE anything is persisted: an LLM failure leaves no
      conversation, message, or activity rows behind
    - Each turn stores the user message and the assistant reply (with token usage),
      records an `ai_chat` activity, and bumps last_message_at
    - Conversation messages are returned oldest first

Design Decisions:
    - System prompt = persona/knowledge (core/pastoral_prompt.build_system_prompt)
      + member context, rebuilt every turn so persona edits apply immediately
    - Empty model replies fall back to FALLBACK_REPLY rather than storing ""
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.config import get_settings
from ministry.core.dates import utcnow
from ministry.core.domain_types import ActivityType
from ministry.core.errors import ErrorContext, ResourceNotFoundError
from ministry.core.pastoral_prompt import (
    FALLBACK_REPLY, HISTORY_LIMIT, KNOWLEDGE_LIMIT, RECENT_ACTIVITY_LIMIT,
    build_system_prompt, chat_messages, conversation_title, member_context,
)
from ministry.infrastructure.anthropic_client import ResilientAnthropicClient
from ministry.models.activity import MemberActivity
from ministry.models.ai import AiConfig, AiConversation, AiKnowledgeEntry, AiMessage
from ministry.models.member import Member
from ministry.services.member_service import record_activity

logger = logging.getLogger(__name__)

CONVERSATION_LIST_LIMIT = 50


class PastoralChat:
    """One member's chat with the pastoral assistant."""

    def __init__(self, db: AsyncSession, llm: ResilientAnthropicClient):
        self.db = db
        self.llm = llm

    async def _conversation(self, member: Member, conversation_id: uuid.UUID) -> AiConversation:
        conversation = await self.db.get(AiConversation, conversation_id)
        if conversation is None or conversation.member_id != member.id:
            raise ResourceNotFoundError("Conversation", str(conversation_id))
        return conversation

    async def _history(self, conversation_id: uuid.UUID) -> list[dict]:
        rows = await self.db.execute(
            select(AiMessage)
            .where(AiMessage.conversation_id == conversation_id)
            .order_by(AiMessage.created_at.desc())
            .limit(HISTORY_LIMIT),
        )
        return [
            {"role": m.role, "content": m.content}
            for m in reversed(rows.scalars().all())
        ]

    async def _system_prompt(self, member: Member) -> str:
        config = {
            row.config_key: row.config_value
            for row in (await self.db.execute(select(AiConfig))).scalars().all()
        }
        knowledge = (await self.db.execute(
            select(AiKnowledgeEntry)
            .where(AiKnowledgeEntry.is_active.is_(True))
            .order_by(AiKnowledgeEntry.priority.desc())
            .limit(KNOWLEDGE_LIMIT),
        )).scalars().all()
        activities = (await self.db.execute(
            select(MemberActivity)
            .where(MemberActivity.member_id == member.id)
            .order_by(MemberActivity.created_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT),
        )).scalars().all()

        base = build_system_prompt(config, [
            {
                "title": k.title,
                "content": k.content,
                "scripture_references": k.scripture_references,
            }
            for k in knowledge
        ], ministry_name=get_settings().ministry_name)
        context = member_context(
            {
                "first_name": member.first_name,
                "last_name": member.last_name,
                "tier": member.tier,
                "created_at": member.created_at,
            },
            member.profile.as_dict() if member.profile else None,
            [
                {"activity_type": a.activity_type, "resource_name": a.resource_name}
                for a in activities
            ],
        )
        return f"{base}\n\n{context}"

    async def reply(
        self, member: Member, message: str, conversation_id: uuid.UUID | None = None,
    ) -> dict:
        conversation = None
        history: list[dict] = []
        if conversation_id is not None:
            conversation = await self._conversation(member, conversation_id)
            history = await self._history(conversation.id)

        completion = await self.llm.complete(
            system=await self._system_prompt(member),
            messages=chat_messages(history, message),
            max_tokens=get_settings().ai_max_tokens,
            temperature=0.8,
            context=ErrorContext(
                member_id=str(member.id),
                resource_id=str(conversation_id) if conversation_id else None,
            ),
        )
        text = completion.text.strip() or FALLBACK_REPLY

        now = utcnow()
        if conversation is None:
            conversation = AiConversation(
                member_id=member.id,
                title=conversation_title(message),
                member_context={"tier": member.tier},
            )
            self.db.add(conversation)
            await self.db.flush()
        self.db.add(AiMessage(
            conversation_id=conversation.id, member_id=member.id,
            role="user", content=message, tokens_used=completion.input_tokens,
            created_at=now,
        ))
        self.db.add(AiMessage(
            conversation_id=conversation.id, member_id=member.id,
            role="assistant", content=text, tokens_used=completion.output_tokens,
            model_used=completion.model, created_at=utcnow(),
        ))
        record_activity(
            self.db, member.id, ActivityType.AI_CHAT.value,
            resource_type="conversation",
            resource_id=str(conversation.id),
            resource_name=conversation.title,
        )
        conversation.last_message_at = now
        await self.db.commit()

        logger.info(
            "Pastoral chat reply stored",
            extra={
                "member_id": str(member.id),
                "conversation_id": str(conversation.id),
                "input_tokens": completion.input_tokens,
                "output_tokens": completion.output_tokens,
            },
        )
        return {"response": text, "conversation_id": conversation.id}

    async def conversations(self, member: Member) -> list[dict]:
        rows = await self.db.execute(
            select(AiConversation)
            .where(AiConversation.member_id == member.id)
            .order_by(AiConversation.last_message_at.desc())
            .limit(CONVERSATION_LIST_LIMIT),
        )
        return [c.as_dict() for c in rows.scalars().all()]

    async def conversation_detail(self, member: Member, conversation_id: uuid.UUID) -> dict:
        conversation = await self._conversation(member, conversation_id)
        rows = await self.db.execute(
            select(AiMessage)
            .where(AiMessage.conversation_id == conversation.id)
            .order_by(AiMessage.created_at),
        )
        return {
            "conversation": conversation.as_dict(),
            "messages": [m.as_dict() for m in rows.scalars().all()],
        }
