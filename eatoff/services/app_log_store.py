from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.models.app_log import AppLog

logger = structlog.get_logger(__name__)


async def log_event(
    session: AsyncSession,
    level: str,
    event_type: str,
    message: str | None = None,
    conversation_id: int | None = None,
    data: dict | None = None,
    commit: bool = True,
) -> None:
    """Persist an operational event for the admin helpdesk and mirror it to the log stream."""
    emit = getattr(logger, level, logger.info)
    emit(event_type, conversation_id=conversation_id, detail=message, data=data)
    session.add(
        AppLog(
            level=level,
            event_type=event_type,
            message=message,
            conversation_id=conversation_id,
            data=data,
        )
    )
    if commit:
        await session.commit()
