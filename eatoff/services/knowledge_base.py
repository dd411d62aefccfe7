from __future__ import annotations

from functools import lru_cache

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.core.config import PROMPTS_DIR, settings
from eatoff.models.knowledge_article import KnowledgeArticle

logger = structlog.get_logger(__name__)

MAX_KB_RESULTS = 3
SYSTEM_PROMPT_FILE = "support_system.txt"
KB_PROMPT_HEADER = "Relevant knowledge base articles:"


@lru_cache
def load_system_prompt(name: str = SYSTEM_PROMPT_FILE) -> str:
    try:
        return (PROMPTS_DIR / name).read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        logger.warning("prompt_missing", prompt=name)
        return ""


def format_snippet(article: KnowledgeArticle) -> str:
    return f"[{article.category}] {article.title}: {article.content}"


async def find_articles_for_ai(
    session: AsyncSession,
    query: str,
    limit: int | None = None,
) -> list[KnowledgeArticle]:
    """Substring lookup over title and content, no ranking beyond database order."""
    effective_limit = min(limit or settings.KB_SEARCH_LIMIT, MAX_KB_RESULTS)
    if effective_limit <= 0:
        return []
    pattern = f"%{query}%"
    result = await session.execute(
        select(KnowledgeArticle)
        .where(KnowledgeArticle.is_active_for_ai.is_(True))
        .where(KnowledgeArticle.title.ilike(pattern) | KnowledgeArticle.content.ilike(pattern))
        .limit(effective_limit)
    )
    return list(result.scalars().all())


async def search_knowledge_base(
    session: AsyncSession,
    query: str,
    limit: int | None = None,
) -> list[str]:
    articles = await find_articles_for_ai(session, query, limit)
    return [format_snippet(article) for article in articles]


def build_system_prompt(snippets: list[str], base_prompt: str | None = None) -> str:
    prompt = base_prompt if base_prompt is not None else load_system_prompt()
    if not snippets:
        return prompt
    return f"{prompt}\n\n{KB_PROMPT_HEADER}\n" + "\n\n".join(snippets)
