from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.api.deps import require_role
from eatoff.core.database import get_session
from eatoff.models.support_conversation import STATUS_RESOLVED, SupportConversation
from eatoff.models.support_ticket import SupportTicket
from eatoff.schemas.admin.support_ticket import SupportStats
from eatoff.services.auth import AdminPrincipal
from eatoff.utils.time import start_of_utc_day

router = APIRouter(prefix="/api/admin/support", tags=["admin"])


def deflection_rate(ai_resolved: int, total_conversations: int) -> int:
    """Share of all conversations the AI closed without a human, as a whole percent."""
    if total_conversations <= 0:
        return 0
    return int(ai_resolved / total_conversations * 100 + 0.5)


async def _count(session: AsyncSession, query) -> int:
    return (await session.scalar(query)) or 0


@router.get("/stats", response_model=SupportStats)
async def support_stats(
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin", "agent")),
) -> SupportStats:
    count_tickets = select(func.count()).select_from(SupportTicket)
    count_conversations = select(func.count()).select_from(SupportConversation)

    open_tickets = await _count(session, count_tickets.where(SupportTicket.status == "open"))
    in_progress = await _count(
        session, count_tickets.where(SupportTicket.status == "in_progress")
    )
    resolved_today = await _count(
        session,
        count_tickets.where(SupportTicket.status == "resolved").where(
            SupportTicket.resolved_at >= start_of_utc_day()
        ),
    )
    total_conversations = await _count(session, count_conversations)
    ai_resolved = await _count(
        session,
        count_conversations.where(SupportConversation.is_handled_by_ai.is_(True)).where(
            SupportConversation.status == STATUS_RESOLVED
        ),
    )

    return SupportStats(
        openTickets=open_tickets,
        inProgressTickets=in_progress,
        resolvedToday=resolved_today,
        totalConversations=total_conversations,
        deflectionRate=deflection_rate(ai_resolved, total_conversations),
    )
