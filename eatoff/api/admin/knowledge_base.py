from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.api.admin.utils import active_filter, list_response
from eatoff.api.deps import get_request_ip, require_role
from eatoff.core.database import get_session
from eatoff.models.knowledge_article import KnowledgeArticle
from eatoff.schemas.admin.knowledge_base import (
    KnowledgeArticleCreate,
    KnowledgeArticleOut,
    KnowledgeArticleUpdate,
)
from eatoff.services.audit import record_audit, snapshot
from eatoff.services.auth import AdminPrincipal
from eatoff.utils.time import utc_now

router = APIRouter(prefix="/api/admin/knowledge-base", tags=["admin"])


async def _get_article(session: AsyncSession, article_id: int) -> KnowledgeArticle:
    article = await session.get(KnowledgeArticle, article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


@router.get("", response_model=dict)
async def list_articles(
    category: str | None = None,
    q: str | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin", "agent")),
) -> dict:
    query = select(KnowledgeArticle)
    if active_filter(category):
        query = query.where(KnowledgeArticle.category == category)
    if q:
        pattern = f"%{q}%"
        query = query.where(
            KnowledgeArticle.title.ilike(pattern) | KnowledgeArticle.content.ilike(pattern)
        )

    total = await session.scalar(select(func.count()).select_from(query.subquery()))
    result = await session.execute(
        query.order_by(KnowledgeArticle.updated_at.desc(), KnowledgeArticle.id.desc())
        .offset(skip)
        .limit(limit)
    )
    items = [KnowledgeArticleOut.model_validate(item) for item in result.scalars().all()]
    return list_response(items, total or 0)


@router.get("/{article_id}", response_model=KnowledgeArticleOut)
async def get_article(
    article_id: int,
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin", "agent")),
) -> KnowledgeArticleOut:
    return KnowledgeArticleOut.model_validate(await _get_article(session, article_id))


@router.post("", response_model=KnowledgeArticleOut, status_code=201)
async def create_article(
    payload: KnowledgeArticleCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin")),
) -> KnowledgeArticleOut:
    article = KnowledgeArticle(**payload.model_dump())
    session.add(article)
    await session.commit()
    await session.refresh(article)

    await record_audit(
        session,
        admin_id=admin.id,
        entity="knowledge_base",
        entity_id=article.id,
        action="create",
        before=None,
        after=article,
        request=request,
        ip=await get_request_ip(request),
    )
    return KnowledgeArticleOut.model_validate(article)


@router.patch("/{article_id}", response_model=KnowledgeArticleOut)
async def update_article(
    article_id: int,
    payload: KnowledgeArticleUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin")),
) -> KnowledgeArticleOut:
    article = await _get_article(session, article_id)
    before = snapshot(article)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(article, key, value)
    article.updated_at = utc_now()
    await session.commit()

    await record_audit(
        session,
        admin_id=admin.id,
        entity="knowledge_base",
        entity_id=article.id,
        action="update",
        before=before,
        after=article,
        request=request,
        ip=await get_request_ip(request),
    )
    return KnowledgeArticleOut.model_validate(article)


@router.delete("/{article_id}", status_code=204)
async def delete_article(
    article_id: int,
    request: Request,
    session: AsyncSession = Depends(get_session),
    admin: AdminPrincipal = Depends(require_role("admin")),
) -> Response:
    article = await _get_article(session, article_id)
    before = snapshot(article)
    await session.delete(article)
    await session.commit()

    await record_audit(
        session,
        admin_id=admin.id,
        entity="knowledge_base",
        entity_id=article_id,
        action="delete",
        before=before,
        after=None,
        request=request,
        ip=await get_request_ip(request),
    )
    return Response(status_code=204)
