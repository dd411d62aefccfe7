from __future__ import annotations

import secrets
import string
from dataclasses import dataclass

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.models.customer import Customer
from eatoff.models.support_conversation import STATUS_ESCALATED, SupportConversation
from eatoff.models.support_message import SupportMessage
from eatoff.models.support_ticket import SupportTicket
from eatoff.services.app_log_store import log_event
from eatoff.services.escalation import escalation_ack
from eatoff.utils.time import utc_now

logger = structlog.get_logger(__name__)

TICKET_ID_ALPHABET = string.ascii_uppercase + string.digits
TICKET_ID_LENGTH = 6
SUBJECT_PREFIX_CHARS = 50


@dataclass(frozen=True)
class EscalationResult:
    ticket: SupportTicket
    ack_message: SupportMessage


def generate_ticket_number(year: int | None = None) -> str:
    year = year or utc_now().year
    suffix = "".join(secrets.choice(TICKET_ID_ALPHABET) for _ in range(TICKET_ID_LENGTH))
    return f"TKT-{year}-{suffix}"


async def build_support_bundle(session: AsyncSession, customer_id: int) -> dict | None:
    customer = await session.get(Customer, customer_id)
    if customer is None:
        return None
    return {
        "customer": {
            "id": customer.id,
            "name": customer.name,
            "email": customer.email,
            "membershipTier": customer.membership_tier,
            "loyaltyPoints": customer.loyalty_points,
            "createdAt": customer.created_at.isoformat() if customer.created_at else None,
        },
        "generatedAt": utc_now().isoformat(),
    }


async def escalate_conversation(
    session: AsyncSession,
    conversation: SupportConversation,
    content: str,
    reason: str | None,
) -> EscalationResult | None:
    """Hand the conversation to a human and open its ticket.

    The status flip is a single conditional UPDATE, so only one caller wins the
    transition; everyone else gets ``None`` and no ticket is created.
    """
    now = utc_now()
    result = await session.execute(
        update(SupportConversation)
        .where(SupportConversation.id == conversation.id)
        .where(SupportConversation.status != STATUS_ESCALATED)
        .values(
            status=STATUS_ESCALATED,
            escalated_at=now,
            escalation_reason=reason,
            is_handled_by_ai=False,
            last_message_at=now,
            updated_at=now,
        )
    )
    if result.rowcount != 1:
        logger.info("escalation_skipped", conversation_id=conversation.id, reason=reason)
        return None

    ticket = SupportTicket(
        conversation_id=conversation.id,
        customer_id=conversation.customer_id,
        ticket_number=generate_ticket_number(now.year),
        subject=f"Support request: {content[:SUBJECT_PREFIX_CHARS]}...",
        description=content,
        category="general",
        priority="medium",
        status="open",
        support_bundle=await build_support_bundle(session, conversation.customer_id),
    )
    session.add(ticket)

    ack = SupportMessage(
        conversation_id=conversation.id,
        role="assistant",
        content=escalation_ack(ticket.ticket_number),
    )
    session.add(ack)

    await log_event(
        session,
        level="info",
        event_type="support_escalated",
        message=reason,
        conversation_id=conversation.id,
        data={
            "ticket_number": ticket.ticket_number,
            "customer_id": conversation.customer_id,
        },
        commit=False,
    )
    await session.commit()
    await session.refresh(conversation)
    return EscalationResult(ticket=ticket, ack_message=ack)
