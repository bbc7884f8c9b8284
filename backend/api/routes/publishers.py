"""
Publisher API routes.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_admin
from api.schemas.common import DataResponse
from api.schemas.content import PublisherCreateRequest, PublisherResponse
from infrastructure.database.connection import get_db
from infrastructure.database.models import Publisher
from services.guards import GuardContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/publishers", tags=["Publishers"])


@router.get("", response_model=DataResponse[list[PublisherResponse]])
async def list_publishers(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Publisher).order_by(Publisher.created_at, Publisher.name))
    return DataResponse[list[PublisherResponse]](
        data=[PublisherResponse.model_validate(p) for p in result.scalars().all()]
    )


@router.post(
    "",
    response_model=DataResponse[PublisherResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_publisher(
    body: PublisherCreateRequest,
    _: Annotated[GuardContext, Depends(require_admin)],
    db: AsyncSession = Depends(get_db),
):
    """Add a publisher (admin only)."""
    name = (body.name or "").strip()
    logo = (body.logo or "").strip()
    if not name or not logo:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and logo are required",
        )

    publisher = Publisher(name=name, logo=logo)
    db.add(publisher)
    await db.commit()

    logger.info("Publisher %s added", publisher.name)
    return DataResponse[PublisherResponse](
        message="Publisher added successfully",
        data=PublisherResponse.model_validate(publisher),
    )
