from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


def _parse_keywords(value: Any) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return None


class KnowledgeArticleBase(BaseModel):
    title: str
    content: str
    category: str
    subcategory: str | None = None
    keywords: list[str] | None = None
    is_public: bool = True
    is_active_for_ai: bool = True

    @field_validator("keywords", mode="before")
    @classmethod
    def parse_keywords(cls, value: Any) -> list[str] | None:
        return _parse_keywords(value)


class KnowledgeArticleCreate(KnowledgeArticleBase):
    pass


class KnowledgeArticleUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    category: str | None = None
    subcategory: str | None = None
    keywords: list[str] | None = None
    is_public: bool | None = None
    is_active_for_ai: bool | None = None

    @field_validator("keywords", mode="before")
    @classmethod
    def parse_keywords(cls, value: Any) -> list[str] | None:
        return _parse_keywords(value)


class KnowledgeArticleOut(KnowledgeArticleBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    view_count: int = 0
    helpful_count: int = 0
    not_helpful_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
