from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.api.admin.utils import active_filter, list_response
from eatoff.api.deps import get_request_ip, require_role
from eatoff.core.database import get_session
from eatoff.models.customer import Customer
from eatoff.models.support_conversation import SupportConversation
from eatoff.models.support_message import SupportMessage
from eatoff.models.support_ticket import SupportTicket
from eatoff.schemas.admin.support_ticket import (
    CustomerSummary,
    SupportTicketDetail,
    SupportTicketOut,
    SupportTicketUpdate,
    TicketReply,
)
from eatoff.schemas.support import SupportMessageOut
from eatoff.services.audit import record_audit, snapshot
from eatoff.services.auth import AdminPrincipal
from eatoff.utils.time import utc_now

router = APIRouter(prefix="/api/admin/support/tickets", tags=["admin"])


def _ticket_out(ticket: SupportTicket, customer: Customer | None) -> SupportTicketOut:
    out = SupportTicketOut.model_validate(ticket)
    if customer is not None:
        out.customer = CustomerSummary.model_validate(customer)
    return out


@router.get("", response_model=dict)
async def list_tickets(
    status: str | None = None,
    priority: str | None = None,
    category: str | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin", "agent")),
) -> dict:
    query = select(SupportTicket, Customer).outerjoin(
        Customer, Customer.id == SupportTicket.customer_id
    )
    if active_filter(status):
        query = query.where(SupportTicket.status == status)
    if active_filter(priority):
        query = query.where(SupportTicket.priority == priority)
    if active_filter(category):
        query = query.where(SupportTicket.category == category)

    total = await session.scalar(select(func.count()).select_from(query.subquery()))
    result = await session.execute(
        query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
        .offset(skip)
        .limit(limit)
    )
    items = [_ticket_out(ticket, customer) for ticket, customer in result.all()]
    return list_response(items, total or 0)


@router.get("/{ticket_id}", response_model=SupportTicketDetail)
async def get_ticket(
    ticket_id: int,
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin", "agent")),
) -> SupportTicketDetail:
    ticket = await session.get(SupportTicket, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    customer = await session.get(Customer, ticket.customer_id)

    messages: list[SupportMessageOut] = []
    if ticket.conversation_id is not None:
        result = await session.execute(
            select(SupportMessage)
            .where(SupportMessage.conversation_id == ticket.conversation_id)
            .order_by(SupportMessage.created_at, SupportMessage.id)
        )
        messages = [SupportMessageOut.model_validate(item) for item in result.scalars().all()]

    return SupportTicketDetail(
        **_ticket_out(ticket, customer).model_dump(),
        messages=messages,
    )


@router.patch("/{ticket_id}", response_model=SupportTicketOut)
async def update_ticket(
    ticket_id: int,
    payload: SupportTicketUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin", "agent")),
) -> SupportTicketOut:
    ticket = await session.get(SupportTicket, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")

    before = snapshot(ticket)
    changes = payload.model_dump(exclude_unset=True)
    now = utc_now()
    if changes.get("status"):
        ticket.status = changes["status"]
    if changes.get("priority"):
        ticket.priority = changes["priority"]
    if "assigned_agent_id" in changes:
        ticket.assigned_agent_id = changes["assigned_agent_id"]
        ticket.assigned_at = now
    if changes.get("resolution"):
        ticket.resolution = changes["resolution"]
        ticket.resolved_at = now
        ticket.status = "resolved"
    ticket.updated_at = now
    await session.commit()

    await record_audit(
        session,
        admin_id=admin.id,
        entity="support_tickets",
        entity_id=ticket.id,
        action="update",
        before=before,
        after=ticket,
        request=request,
        ip=await get_request_ip(request),
    )
    return SupportTicketOut.model_validate(ticket)


@router.post("/{ticket_id}/reply", response_model=SupportMessageOut)
async def reply_to_ticket(
    ticket_id: int,
    payload: TicketReply,
    request: Request,
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin", "agent")),
) -> SupportMessageOut:
    if not payload.content.strip():
        raise HTTPException(status_code=400, detail="Reply content is required")
    ticket = await session.get(SupportTicket, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    if ticket.conversation_id is None:
        raise HTTPException(
            status_code=400, detail="No conversation associated with this ticket"
        )

    message = SupportMessage(
        conversation_id=ticket.conversation_id,
        role="agent",
        content=payload.content.strip(),
    )
    session.add(message)
    conversation = await session.get(SupportConversation, ticket.conversation_id)
    if conversation is not None:
        conversation.last_message_at = utc_now()
        conversation.updated_at = utc_now()
    await session.commit()
    await session.refresh(message)

    await record_audit(
        session,
        admin_id=admin.id,
        entity="support_messages",
        entity_id=message.id,
        action="reply",
        before=None,
        after=message,
        request=request,
        ip=await get_request_ip(request),
    )
    return SupportMessageOut.model_validate(message)
