"""
Billing API routes: plans, hosted checkout and the payment success callback.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.payments.stripe_adapter import StripeError
from api.dependencies import get_checkout_provider, get_token_claims, require_admin
from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.billing import CheckoutRequest, CheckoutResponse, PlanCreateRequest, PlanResponse
from api.schemas.common import DataResponse, MessageResponse
from api.utils import require_uuid
from core.interfaces.services import CheckoutProvider
from core.security.tokens import TokenPayload
from infrastructure.database.connection import get_db
from infrastructure.database.models import Plan
from services.guards import GuardContext
from services.payment_bridge import InvalidPlanError, PaymentBridge, PaymentBridgeError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Billing"])


@router.get("/plans", response_model=DataResponse[list[PlanResponse]])
async def list_plans(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Plan).order_by(Plan.price, Plan.name))
    return DataResponse[list[PlanResponse]](
        data=[PlanResponse.model_validate(p) for p in result.scalars().all()]
    )


@router.post(
    "/plans",
    response_model=DataResponse[PlanResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_plan(
    body: PlanCreateRequest,
    _: Annotated[GuardContext, Depends(require_admin)],
    db: AsyncSession = Depends(get_db),
):
    """Add a subscription plan (admin only)."""
    plan = Plan(**body.model_dump())
    db.add(plan)
    await db.commit()
    logger.info("Plan %s added (%d %s)", plan.name, plan.duration, plan.duration_unit)
    return DataResponse[PlanResponse](
        message="Plan added successfully",
        data=PlanResponse.model_validate(plan),
    )


@router.post("/create-payment-intent", response_model=CheckoutResponse)
@limiter.limit(get_rate_limit("checkout"))
async def create_payment_intent(
    request: Request,
    body: CheckoutRequest,
    claims: Annotated[TokenPayload, Depends(get_token_claims)],
    db: AsyncSession = Depends(get_db),
    provider: CheckoutProvider = Depends(get_checkout_provider),
):
    """Open a hosted checkout session for a plan, billed to the token's email."""
    email = claims.email or claims.sub
    plan_id = require_uuid(body.plan_id, "Invalid plan selected", status.HTTP_400_BAD_REQUEST)
    bridge = PaymentBridge(db, provider)
    try:
        session = await bridge.create_session(plan_id, email)
    except InvalidPlanError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (StripeError, PaymentBridgeError):
        logger.exception("Checkout session creation failed for %s", email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating payment session",
        )

    return CheckoutResponse(session_id=session.id, url=session.url)


@router.get("/payment/success", response_model=MessageResponse)
async def payment_success(
    session_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    provider: CheckoutProvider = Depends(get_checkout_provider),
):
    """
    Record a completed checkout and grant its subscription window.

    Safe to call more than once for the same session.
    """
    bridge = PaymentBridge(db, provider)
    try:
        await bridge.complete_session(session_id)
    except Exception:
        logger.exception("Payment completion failed for session %s", session_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error processing payment",
        )
    return MessageResponse(message="Payment processed successfully")
