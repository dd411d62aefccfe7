from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    content: str = ""


class ResolveRequest(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    feedback: str | None = None


class SupportMessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    role: str
    content: str
    rag_source_ids: list[str] | None = None
    ai_model_version: str | None = None
    created_at: datetime | None = None


class ConversationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    title: str | None = None
    status: str
    channel: str
    is_handled_by_ai: bool
    escalated_at: datetime | None = None
    escalation_reason: str | None = None
    last_message_at: datetime | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ConversationDetail(ConversationOut):
    messages: list[SupportMessageOut] = []


class TicketOut(BaseModel):
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
    resolution: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
