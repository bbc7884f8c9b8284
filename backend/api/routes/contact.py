"""
Contact form API routes.

The status update lives at ``PATCH /{message_id}``, so this router must be
included after every other router.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_admin
from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.common import DataResponse, MessageResponse
from api.schemas.contact import ContactMessageResponse, ContactRequest, MessageStatusRequest
from api.utils import require_uuid
from infrastructure.database.connection import get_db
from infrastructure.database.models import ContactMessage, MessageStatus
from services.guards import GuardContext

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Contact"])

MESSAGE_NOT_FOUND = "Message not found"


@router.post("/contact", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("contact"))
async def send_message(
    request: Request,
    body: ContactRequest,
    db: AsyncSession = Depends(get_db),
):
    message = ContactMessage(
        name=body.name,
        email=body.email,
        subject=body.subject,
        message=body.message,
        status=MessageStatus.UNREAD.value,
    )
    db.add(message)
    await db.commit()
    logger.info("Contact message %s received from %s", message.id, body.email)
    return MessageResponse(message="Message sent successfully")


@router.get("/messages", response_model=DataResponse[list[ContactMessageResponse]])
async def list_messages(
    _: Annotated[GuardContext, Depends(require_admin)],
    db: AsyncSession = Depends(get_db),
):
    """Contact inbox, newest-first (admin only)."""
    result = await db.execute(select(ContactMessage).order_by(ContactMessage.created_at.desc()))
    return DataResponse[list[ContactMessageResponse]](
        data=[ContactMessageResponse.model_validate(m) for m in result.scalars().all()]
    )


@router.patch("/{message_id}", response_model=MessageResponse)
async def update_message_status(
    message_id: str,
    body: MessageStatusRequest,
    _: Annotated[GuardContext, Depends(require_admin)],
    db: AsyncSession = Depends(get_db),
):
    """Mark a message read, unread or archived (admin only)."""
    if body.status not in {s.value for s in MessageStatus}:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    result = await db.execute(
        select(ContactMessage).where(
            ContactMessage.id == require_uuid(message_id, MESSAGE_NOT_FOUND)
        )
    )
    message = result.scalar_one_or_none()
    if not message:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MESSAGE_NOT_FOUND)

    message.status = body.status
    await db.commit()
    return MessageResponse(message="Message status updated successfully")
