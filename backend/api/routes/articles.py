"""
Article API routes: listings, authoring, moderation, views and comments.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    enforce,
    ensure_same_email,
    get_guard_context,
    get_token_claims,
    require,
    require_admin,
    require_subscription,
)
from api.schemas.common import DataResponse, MessageResponse, Page, PageResponse
from api.schemas.content import (
    ArticleCreateRequest,
    ArticleResponse,
    ArticleStatusRequest,
    ArticleSummary,
    ArticleUpdateRequest,
    CommentCreateRequest,
    CommentResponse,
)
from api.utils import require_uuid, total_pages
from core.security.tokens import TokenPayload
from infrastructure.database.connection import get_db
from infrastructure.database.models import Article, ArticleStatus, ArticleTag, Comment
from services.articles import (
    ArticleFilters,
    add_comment,
    check_authoring_allowed,
    count_authored,
    get_article,
    get_publisher,
    list_articles,
    parse_tags,
)
from services.guards import GuardContext, active_subscription

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Articles"])

TRENDING_LIMIT = 6

ARTICLE_NOT_FOUND = "Article not found"


def _publisher_filter(publisher: Optional[str]) -> Optional[str]:
    if not publisher:
        return None
    return require_uuid(publisher, "Publisher not found")


async def _load_article(db: AsyncSession, article_id: str) -> Article:
    article = await get_article(db, require_uuid(article_id, ARTICLE_NOT_FOUND))
    if not article:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ARTICLE_NOT_FOUND)
    return article


def _page(articles, total: int, page: int, limit: int) -> PageResponse[ArticleResponse]:
    return PageResponse[ArticleResponse](
        data=[ArticleResponse.model_validate(a) for a in articles],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


# ============================================================================
# Listings
# ============================================================================


@router.get("/articles", response_model=PageResponse[ArticleResponse])
async def get_articles(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: Optional[str] = None,
    publisher: Optional[str] = None,
    tags: Optional[str] = Query(None, description="Comma-separated tag values"),
    status_filter: Optional[list[str]] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """List articles newest-first with search, publisher, tag and status filters."""
    filters = ArticleFilters(
        search=search,
        publisher_id=_publisher_filter(publisher),
        tags=parse_tags(tags),
        statuses=[s for s in status_filter or [] if s],
    )
    articles, total = await list_articles(db, filters, page, limit)
    return _page(articles, total, page, limit)


@router.get("/articles/trending", response_model=DataResponse[list[ArticleResponse]])
async def get_trending_articles(db: AsyncSession = Depends(get_db)):
    """Most viewed approved articles."""
    result = await db.execute(
        select(Article)
        .where(Article.status == ArticleStatus.APPROVED.value)
        .order_by(Article.views.desc(), Article.created_at.desc())
        .limit(TRENDING_LIMIT)
    )
    return DataResponse[list[ArticleResponse]](
        data=[ArticleResponse.model_validate(a) for a in result.scalars().all()]
    )


@router.get("/articles/premium", response_model=PageResponse[ArticleResponse])
async def get_premium_articles(
    _: Annotated[GuardContext, Depends(require_subscription)],
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: Optional[str] = None,
    publisher: Optional[str] = None,
    tags: Optional[str] = Query(None, description="Comma-separated tag values"),
    db: AsyncSession = Depends(get_db),
):
    """Approved premium articles, for subscribers only."""
    filters = ArticleFilters.premium(
        search=search,
        publisher_id=_publisher_filter(publisher),
        tags=parse_tags(tags),
    )
    articles, total = await list_articles(db, filters, page, limit)
    return _page(articles, total, page, limit)


@router.get("/articles/my-articles/{email}", response_model=DataResponse[Page[ArticleResponse]])
async def get_my_articles(
    email: str,
    claims: Annotated[TokenPayload, Depends(get_token_claims)],
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """The requesting author's articles in every status, newest-first."""
    ensure_same_email(claims, email)
    total = await count_authored(db, email)
    result = await db.execute(
        select(Article)
        .where(Article.author_email == email)
        .order_by(Article.created_at.desc(), Article.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return DataResponse[Page[ArticleResponse]](
        data=Page[ArticleResponse](
            articles=[ArticleResponse.model_validate(a) for a in result.scalars().all()],
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages(total, limit),
        )
    )


@router.get("/articles/user/{email}", response_model=DataResponse[list[ArticleSummary]])
async def get_user_articles(
    email: str,
    claims: Annotated[TokenPayload, Depends(get_token_claims)],
    db: AsyncSession = Depends(get_db),
):
    """Compact list the client uses to pre-check the authoring limit."""
    ensure_same_email(claims, email)
    result = await db.execute(
        select(Article).where(Article.author_email == email).order_by(Article.created_at.desc())
    )
    return DataResponse[list[ArticleSummary]](
        data=[ArticleSummary.model_validate(a) for a in result.scalars().all()]
    )


# ============================================================================
# Single article
# ============================================================================


@router.get("/articles/{article_id}", response_model=DataResponse[ArticleResponse])
async def get_single_article(
    article_id: str,
    ctx: Annotated[GuardContext, Depends(get_guard_context)],
    db: AsyncSession = Depends(get_db),
):
    """
    Get one article.

    Premium articles are served to their author and to admins; anyone else
    needs an active subscription.
    """
    article = await _load_article(db, article_id)

    if article.is_premium and article.author_email != ctx.email:
        user = await ctx.load_user()
        if not (user and user.is_admin):
            await enforce(ctx, active_subscription)

    return DataResponse[ArticleResponse](data=ArticleResponse.model_validate(article))


@router.post(
    "/articles",
    response_model=DataResponse[ArticleResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_article(
    body: ArticleCreateRequest,
    ctx: Annotated[GuardContext, Depends(require(check_authoring_allowed))],
    db: AsyncSession = Depends(get_db),
):
    """Submit an article for review, subject to the authoring limit."""
    publisher = await get_publisher(db, require_uuid(body.publisher, "Publisher not found"))
    if not publisher:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Publisher not found")

    user = ctx.user
    article = Article(
        title=body.title,
        image=body.image,
        description=body.description,
        content=body.content,
        publisher=publisher,
        tags=[ArticleTag(value=t.value, label=t.label) for t in body.tags],
        author_email=user.email,
        author_name=body.author_name or user.name,
        author_image=body.author_image or user.photo,
        is_premium=False,
        status=ArticleStatus.PENDING.value,
        views=0,
        ratings=[],
        average_rating=0.0,
    )
    db.add(article)
    await db.commit()

    logger.info("Article %s submitted by %s", article.id, user.email)
    return DataResponse[ArticleResponse](
        message="Article added successfully",
        data=ArticleResponse.model_validate(article),
    )


@router.patch("/articles/{article_id}", response_model=MessageResponse)
async def update_article(
    article_id: str,
    body: ArticleUpdateRequest,
    claims: Annotated[TokenPayload, Depends(get_token_claims)],
    db: AsyncSession = Depends(get_db),
):
    """Edit an article's content (author only)."""
    article = await _load_article(db, article_id)
    if article.author_email != (claims.email or claims.sub):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized access")

    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to update article")

    if "publisher" in updates:
        publisher = await get_publisher(db, require_uuid(updates.pop("publisher"), "Publisher not found"))
        if not publisher:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Publisher not found")
        article.publisher = publisher

    if "tags" in updates:
        article.tags = [ArticleTag(value=t["value"], label=t["label"]) for t in updates.pop("tags")]

    for field, value in updates.items():
        setattr(article, field, value)

    await db.commit()
    logger.info("Article %s updated by its author", article.id)
    return MessageResponse(message="Article updated successfully")


@router.delete("/articles/{article_id}", response_model=MessageResponse)
async def delete_article(
    article_id: str,
    ctx: Annotated[GuardContext, Depends(get_guard_context)],
    db: AsyncSession = Depends(get_db),
):
    """Delete an article and its comments (author or admin)."""
    article = await _load_article(db, article_id)
    if article.author_email != ctx.email:
        user = await ctx.load_user()
        if not (user and user.is_admin):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized access")

    await db.delete(article)
    await db.commit()
    logger.info("Article %s deleted by %s", article_id, ctx.email)
    return MessageResponse(message="Article deleted successfully")


@router.post("/articles/{article_id}/view", response_model=MessageResponse)
async def increment_views(article_id: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        update(Article)
        .where(Article.id == require_uuid(article_id, ARTICLE_NOT_FOUND))
        .values(views=Article.views + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ARTICLE_NOT_FOUND)
    await db.commit()
    return MessageResponse(message="View count updated")


# ============================================================================
# Moderation (admin)
# ============================================================================


@router.patch("/articles/{article_id}/premium", response_model=MessageResponse)
async def make_article_premium(
    article_id: str,
    _: Annotated[GuardContext, Depends(require_admin)],
    db: AsyncSession = Depends(get_db),
):
    article = await _load_article(db, article_id)
    article.is_premium = True
    await db.commit()
    logger.info("Article %s marked premium", article.id)
    return MessageResponse(message="Article marked as premium successfully")


@router.patch("/admin/articles/{article_id}", response_model=MessageResponse)
async def change_article_status(
    article_id: str,
    body: ArticleStatusRequest,
    _: Annotated[GuardContext, Depends(require_admin)],
    db: AsyncSession = Depends(get_db),
):
    """Approve, decline or reset an article to pending."""
    if body.status not in {s.value for s in ArticleStatus}:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    article = await _load_article(db, article_id)
    article.status = body.status
    if body.declined_reason:
        article.declined_reason = body.declined_reason

    await db.commit()
    logger.info("Article %s moved to %s", article.id, body.status)
    return MessageResponse(message=f"Article {body.status} successfully")


# ============================================================================
# Comments
# ============================================================================


@router.get("/articles/{article_id}/comments", response_model=DataResponse[list[CommentResponse]])
async def get_comments(
    article_id: str,
    _: Annotated[TokenPayload, Depends(get_token_claims)],
    db: AsyncSession = Depends(get_db),
):
    """Comments on an article, newest-first."""
    result = await db.execute(
        select(Comment)
        .where(Comment.article_id == require_uuid(article_id, ARTICLE_NOT_FOUND))
        .order_by(Comment.created_at.desc())
    )
    return DataResponse[list[CommentResponse]](
        data=[CommentResponse.model_validate(c) for c in result.scalars().all()]
    )


@router.post("/articles/{article_id}/comments", response_model=DataResponse[CommentResponse])
async def create_comment(
    article_id: str,
    body: CommentCreateRequest,
    ctx: Annotated[GuardContext, Depends(get_guard_context)],
    db: AsyncSession = Depends(get_db),
):
    """Add a rated comment and refresh the article's average rating."""
    article = await _load_article(db, article_id)
    user = await ctx.load_user()

    comment = await add_comment(
        db,
        article,
        user_email=ctx.email,
        user_name=user.name if user else ctx.claims.claims.get("name"),
        user_image=user.photo if user else ctx.claims.claims.get("photo"),
        rating=body.rating,
        body=body.comment,
    )
    await db.commit()

    return DataResponse[CommentResponse](
        message="Comment added successfully",
        data=CommentResponse.model_validate(comment),
    )
