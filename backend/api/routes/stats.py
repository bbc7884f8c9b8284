"""
Statistics API routes.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import ensure_same_email, get_token_claims, require_admin
from api.schemas.common import DataResponse
from api.schemas.stats import AdminStats, SiteStats, UserStats, UserStatsResponse
from core.security.tokens import TokenPayload
from infrastructure.database.connection import get_db
from services import stats as stats_service
from services.guards import GuardContext

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Statistics"])


@router.get("/stats", response_model=DataResponse[SiteStats])
async def get_site_stats(db: AsyncSession = Depends(get_db)):
    data = await stats_service.site_stats(db)
    return DataResponse[SiteStats](data=SiteStats(**data))


@router.get("/admin/stats", response_model=DataResponse[AdminStats])
async def get_admin_stats(
    _: Annotated[GuardContext, Depends(require_admin)],
    db: AsyncSession = Depends(get_db),
):
    data = await stats_service.admin_stats(db)
    return DataResponse[AdminStats](data=AdminStats.model_validate(data))


@router.get("/user-stats", response_model=UserStatsResponse)
async def get_user_stats(
    claims: Annotated[TokenPayload, Depends(get_token_claims)],
    email: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Author dashboard for the requesting user."""
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")
    ensure_same_email(claims, email)

    data = await stats_service.user_stats(db, email)
    return UserStatsResponse(stats=UserStats.model_validate(data, from_attributes=True))
