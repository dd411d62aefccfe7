from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eatoff.api.deps import get_current_customer
from eatoff.core.database import get_session, get_session_factory
from eatoff.models.customer import Customer
from eatoff.models.support_conversation import STATUS_ACTIVE, STATUS_RESOLVED, SupportConversation
from eatoff.models.support_message import SupportMessage
from eatoff.models.support_ticket import SupportTicket
from eatoff.schemas.support import (
    ConversationDetail,
    ConversationOut,
    MessageCreate,
    ResolveRequest,
    SupportMessageOut,
    TicketOut,
)
from eatoff.services import support_chat
from eatoff.utils.time import utc_now

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/support", tags=["support"])

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


async def _owned_conversation(
    session: AsyncSession, conversation_id: int, customer_id: int
) -> SupportConversation:
    result = await session.execute(
        select(SupportConversation)
        .where(SupportConversation.id == conversation_id)
        .where(SupportConversation.customer_id == customer_id)
    )
    conversation = result.scalars().first()
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@router.get("/conversations", response_model=list[ConversationOut])
async def list_conversations(
    session: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer),
) -> list[ConversationOut]:
    result = await session.execute(
        select(SupportConversation)
        .where(SupportConversation.customer_id == customer.id)
        .order_by(SupportConversation.updated_at.desc(), SupportConversation.id.desc())
    )
    return [ConversationOut.model_validate(item) for item in result.scalars().all()]


@router.post("/conversations", response_model=ConversationOut, status_code=201)
async def create_conversation(
    session: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer),
) -> ConversationOut:
    conversation = SupportConversation(
        customer_id=customer.id,
        status=STATUS_ACTIVE,
        channel="chat",
        is_handled_by_ai=True,
    )
    session.add(conversation)
    await session.commit()
    await session.refresh(conversation)
    return ConversationOut.model_validate(conversation)


@router.get("/conversations/{conversation_id}", response_model=ConversationDetail)
async def get_conversation(
    conversation_id: int,
    session: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer),
) -> ConversationDetail:
    conversation = await _owned_conversation(session, conversation_id, customer.id)
    result = await session.execute(
        select(SupportMessage)
        .where(SupportMessage.conversation_id == conversation.id)
        .order_by(SupportMessage.created_at, SupportMessage.id)
    )
    messages = [SupportMessageOut.model_validate(item) for item in result.scalars().all()]
    return ConversationDetail(
        **ConversationOut.model_validate(conversation).model_dump(),
        messages=messages,
    )


@router.post("/conversations/{conversation_id}/messages")
async def send_message(
    conversation_id: int,
    payload: MessageCreate,
    session: AsyncSession = Depends(get_session),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    customer: Customer = Depends(get_current_customer),
):
    if not payload.content.strip():
        raise HTTPException(status_code=400, detail="Message content is required")
    conversation = await _owned_conversation(session, conversation_id, customer.id)

    outcome = await support_chat.handle_user_message(session, conversation, payload.content)
    if isinstance(outcome, support_chat.EscalatedReply):
        return outcome.as_dict()

    return StreamingResponse(
        support_chat.stream_chat_turn(session_factory, outcome),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/conversations/{conversation_id}/resolve", response_model=dict)
async def resolve_conversation(
    conversation_id: int,
    payload: ResolveRequest | None = None,
    session: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer),
) -> dict:
    conversation = await _owned_conversation(session, conversation_id, customer.id)
    conversation.status = STATUS_RESOLVED
    conversation.resolved_at = utc_now()
    conversation.updated_at = utc_now()
    await session.commit()
    logger.info(
        "conversation_resolved",
        conversation_id=conversation.id,
        rating=payload.rating if payload else None,
        feedback=payload.feedback if payload else None,
    )
    return {"success": True}


@router.get("/tickets", response_model=list[TicketOut])
async def list_tickets(
    session: AsyncSession = Depends(get_session),
    customer: Customer = Depends(get_current_customer),
) -> list[TicketOut]:
    result = await session.execute(
        select(SupportTicket)
        .where(SupportTicket.customer_id == customer.id)
        .order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
    )
    return [TicketOut.model_validate(item) for item in result.scalars().all()]
