from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from eatoff.schemas.support import SupportMessageOut

TicketStatus = Literal["open", "in_progress", "waiting_customer", "resolved", "closed"]
TicketPriority = Literal["low", "medium", "high", "urgent"]


class CustomerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None = None
    email: str | None = None


class SupportTicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int | None = None
    customer_id: int
    ticket_number: str
    subject: str
    description: str
    category: str
    priority: str
    status: str
    assigned_agent_id: int | None = None
    assigned_at: datetime | None = None
    resolution: str | None = None
    resolved_at: datetime | None = None
    support_bundle: dict | None = None
    customer: CustomerSummary | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SupportTicketDetail(SupportTicketOut):
    messages: list[SupportMessageOut] = []


class SupportTicketUpdate(BaseModel):
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assigned_agent_id: int | None = None
    resolution: str | None = None


class TicketReply(BaseModel):
    content: str


class SupportStats(BaseModel):
    openTickets: int
    inProgressTickets: int
    resolvedToday: int
    totalConversations: int
    deflectionRate: int
