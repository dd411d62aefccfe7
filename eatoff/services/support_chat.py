from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eatoff.core.config import settings
from eatoff.models.support_conversation import (
    STATUS_ESCALATED,
    SupportConversation,
)
from eatoff.models.support_message import SupportMessage
from eatoff.services.app_log_store import log_event
from eatoff.services.escalation import should_escalate
from eatoff.services.knowledge_base import build_system_prompt, search_knowledge_base
from eatoff.services.llm_clients import LLMError, stream_reply
from eatoff.services.support_tickets import escalate_conversation
from eatoff.utils.time import utc_now

logger = structlog.get_logger(__name__)

KB_SOURCE_ID = "kb_search"
TITLE_MAX_CHARS = 50
STREAM_ERROR_TEXT = "Failed to process message"

# Replies still being written after the client went away.
_pending_saves: set[asyncio.Task] = set()


@dataclass(frozen=True)
class EscalatedReply:
    message: str
    ticket_number: str

    def as_dict(self) -> dict:
        return {
            "message": self.message,
            "escalated": True,
            "ticketNumber": self.ticket_number,
        }


@dataclass
class ChatTurn:
    conversation_id: int
    user_content: str
    needs_title: bool
    messages: list[dict[str, str]]
    kb_snippets: list[str] = field(default_factory=list)


def sse_event(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def conversation_title(content: str) -> str:
    if len(content) > TITLE_MAX_CHARS:
        return content[:TITLE_MAX_CHARS] + "..."
    return content


def _llm_role(role: str) -> str:
    # Human agent replies read as assistant turns to the model.
    return "user" if role == "user" else "assistant"


async def load_history(
    session: AsyncSession, conversation_id: int, limit: int
) -> list[SupportMessage]:
    result = await session.execute(
        select(SupportMessage)
        .where(SupportMessage.conversation_id == conversation_id)
        .order_by(SupportMessage.created_at.desc(), SupportMessage.id.desc())
        .limit(limit)
    )
    return list(reversed(result.scalars().all()))


async def handle_user_message(
    session: AsyncSession,
    conversation: SupportConversation,
    content: str,
) -> EscalatedReply | ChatTurn:
    """Store the customer's message, then either escalate or prepare the AI turn."""
    content = content.strip()
    session.add(
        SupportMessage(conversation_id=conversation.id, role="user", content=content)
    )
    await session.commit()

    check = should_escalate(content)
    if check.escalate and conversation.status != STATUS_ESCALATED:
        escalation = await escalate_conversation(session, conversation, content, check.reason)
        if escalation is not None:
            return EscalatedReply(
                message=escalation.ack_message.content,
                ticket_number=escalation.ticket.ticket_number,
            )

    history = await load_history(session, conversation.id, settings.SUPPORT_HISTORY_LIMIT)
    snippets = await search_knowledge_base(session, content)
    messages = [{"role": "system", "content": build_system_prompt(snippets)}]
    messages.extend(
        {"role": _llm_role(message.role), "content": message.content} for message in history
    )
    return ChatTurn(
        conversation_id=conversation.id,
        user_content=content,
        needs_title=not conversation.title,
        messages=messages,
        kb_snippets=snippets,
    )


async def save_assistant_reply(session: AsyncSession, turn: ChatTurn, reply: str) -> None:
    session.add(
        SupportMessage(
            conversation_id=turn.conversation_id,
            role="assistant",
            content=reply,
            rag_source_ids=[KB_SOURCE_ID] if turn.kb_snippets else None,
            ai_model_version=settings.OPENAI_MODEL,
        )
    )
    conversation = await session.get(SupportConversation, turn.conversation_id)
    if conversation is not None:
        if turn.needs_title and reply:
            conversation.title = conversation_title(turn.user_content)
        conversation.last_message_at = utc_now()
        conversation.updated_at = utc_now()
    await session.commit()


async def _save_detached(
    session_factory: async_sessionmaker[AsyncSession], turn: ChatTurn, reply: str
) -> None:
    try:
        async with session_factory() as session:
            await save_assistant_reply(session, turn, reply)
    except SQLAlchemyError:
        logger.exception("support_partial_reply_lost", conversation_id=turn.conversation_id)


def _save_in_background(
    session_factory: async_sessionmaker[AsyncSession], turn: ChatTurn, reply: str
) -> None:
    logger.info("support_partial_reply_queued", conversation_id=turn.conversation_id)
    task = asyncio.create_task(_save_detached(session_factory, turn, reply))
    _pending_saves.add(task)
    task.add_done_callback(_pending_saves.discard)


async def _record_stream_failure(
    session_factory: async_sessionmaker[AsyncSession], turn: ChatTurn, exc: Exception
) -> None:
    try:
        async with session_factory() as session:
            await log_event(
                session,
                level="error",
                event_type="llm_stream_failed",
                message=str(exc),
                conversation_id=turn.conversation_id,
                data={"error_type": type(exc).__name__},
            )
    except SQLAlchemyError:
        logger.warning("stream_failure_not_recorded", conversation_id=turn.conversation_id)


async def stream_chat_turn(
    session_factory: async_sessionmaker[AsyncSession],
    turn: ChatTurn,
    llm: Callable[[list[dict[str, str]]], AsyncIterator[str]] | None = None,
) -> AsyncIterator[str]:
    """SSE body for one AI turn; the assembled reply is stored once the model finishes."""
    llm = llm or stream_reply
    parts: list[str] = []
    settled = False
    try:
        async for chunk in llm(turn.messages):
            parts.append(chunk)
            yield sse_event({"content": chunk})
        async with session_factory() as session:
            await save_assistant_reply(session, turn, "".join(parts))
        settled = True
        yield sse_event({"done": True})
    except (LLMError, SQLAlchemyError) as exc:
        settled = True
        logger.exception("support_stream_failed", conversation_id=turn.conversation_id)
        await _record_stream_failure(session_factory, turn, exc)
        yield sse_event({"error": STREAM_ERROR_TEXT})
    finally:
        # Cancelled, or closed at a yield after the client went away.
        if not settled and parts:
            _save_in_background(session_factory, turn, "".join(parts))
