from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.inspection import inspect

from eatoff.models.audit_log import AuditLog


def _serialize(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (list, tuple, set)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(val) for key, val in value.items()}
    return value


def snapshot(value: object | None) -> dict | None:
    """Column values of an ORM row, or a pydantic model dump, as JSON-safe data."""
    if value is None:
        return None
    if isinstance(value, dict):
        return _serialize(value)
    if hasattr(value, "model_dump"):
        return _serialize(value.model_dump(mode="json"))
    mapper = inspect(value).mapper
    return _serialize({attr.key: getattr(value, attr.key) for attr in mapper.column_attrs})


async def record_audit(
    session: AsyncSession,
    *,
    admin_id: int | None,
    entity: str,
    entity_id: int | None,
    action: str,
    before: object | None,
    after: object | None,
    request: Request | None = None,
    ip: str | None = None,
) -> None:
    session.add(
        AuditLog(
            admin_id=admin_id,
            entity=entity,
            entity_id=entity_id,
            action=action,
            before_json=snapshot(before),
            after_json=snapshot(after),
            ip=ip,
            user_agent=request.headers.get("user-agent") if request else None,
        )
    )
    await session.commit()
