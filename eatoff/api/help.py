from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.core.database import get_session
from eatoff.models.knowledge_article import KnowledgeArticle
from eatoff.schemas.help import ArticleFeedback, HelpArticleOut

router = APIRouter(prefix="/api/help", tags=["help"])


@router.get("/articles", response_model=list[HelpArticleOut])
async def list_articles(
    category: str | None = None,
    session: AsyncSession = Depends(get_session),
) -> list[HelpArticleOut]:
    query = select(KnowledgeArticle).where(KnowledgeArticle.is_public.is_(True))
    if category:
        query = query.where(KnowledgeArticle.category == category)
    result = await session.execute(query.order_by(KnowledgeArticle.id))
    return [HelpArticleOut.model_validate(item) for item in result.scalars().all()]


@router.get("/articles/{article_id}", response_model=HelpArticleOut)
async def get_article(
    article_id: int,
    session: AsyncSession = Depends(get_session),
) -> HelpArticleOut:
    article = await session.get(KnowledgeArticle, article_id)
    if article is None or not article.is_public:
        raise HTTPException(status_code=404, detail="Article not found")
    article.view_count = (article.view_count or 0) + 1
    await session.commit()
    return HelpArticleOut.model_validate(article)


@router.post("/articles/{article_id}/feedback", response_model=dict)
async def article_feedback(
    article_id: int,
    payload: ArticleFeedback,
    session: AsyncSession = Depends(get_session),
) -> dict:
    article = await session.get(KnowledgeArticle, article_id)
    if article is None or not article.is_public:
        raise HTTPException(status_code=404, detail="Article not found")
    counter = (
        KnowledgeArticle.helpful_count if payload.helpful else KnowledgeArticle.not_helpful_count
    )
    await session.execute(
        update(KnowledgeArticle)
        .where(KnowledgeArticle.id == article_id)
        .values({counter: counter + 1})
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return {"success": True}
