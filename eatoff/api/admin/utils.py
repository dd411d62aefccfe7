from __future__ import annotations

from typing import Any

ALL = "all"


def active_filter(value: str | None) -> str | None:
    """Query filters treat an empty value or "all" as no filter."""
    if not value or value == ALL:
        return None
    return value


def list_response(items: list[Any], total: int) -> dict[str, Any]:
    return {"data": items, "total": total}
