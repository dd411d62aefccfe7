from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class HelpArticleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    category: str
    subcategory: str | None = None
    view_count: int = 0
    helpful_count: int = 0
    updated_at: datetime | None = None


class ArticleFeedback(BaseModel):
    helpful: bool
