"""
Payment bridge between internal plans and the hosted checkout provider.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.subscription import duration_in_minutes, window_end
from core.interfaces.services import CheckoutItem, CheckoutProvider, CheckoutSession
from infrastructure.config.settings import settings
from infrastructure.database.models import Payment, PaymentStatus, Plan, User

logger = logging.getLogger(__name__)


class PaymentBridgeError(Exception):
    """Base exception for payment bridge failures."""


class InvalidPlanError(PaymentBridgeError):
    """Raised when the requested plan does not exist."""


class PaymentNotCompletedError(PaymentBridgeError):
    """Raised when the provider does not report the session as paid."""


@dataclass
class CompletedPayment:
    payment: Payment
    subscription_end: Optional[datetime]
    already_recorded: bool = False


class PaymentBridge:
    """
    Turns a plan into a checkout session and a paid session into a
    subscription window.
    """

    def __init__(self, db: AsyncSession, provider: CheckoutProvider):
        """
        Initialize the bridge.

        Args:
            db: Async database session
            provider: Hosted checkout provider
        """
        self.db = db
        self.provider = provider

    async def get_plan(self, plan_id: str) -> Plan:
        result = await self.db.execute(select(Plan).where(Plan.id == plan_id))
        plan = result.scalar_one_or_none()
        if plan is None:
            raise InvalidPlanError("Invalid plan selected")
        return plan

    async def create_session(self, plan_id: str, email: str) -> CheckoutSession:
        """
        Open a checkout session for ``plan_id`` on behalf of ``email``.

        The granted minutes and plan identity travel in the session metadata
        and come back untouched on completion.
        """
        plan = await self.get_plan(plan_id)
        minutes = duration_in_minutes(plan.duration, plan.duration_unit)
        if minutes == 0:
            logger.warning("Plan %s has unknown duration unit %r", plan.id, plan.duration_unit)

        client_url = settings.client_url.rstrip("/")
        session = await self.provider.create_checkout_session(
            item=CheckoutItem(
                name=f"{plan.name} - {plan.duration} {plan.duration_unit}",
                description=plan.description,
                unit_amount=round(plan.price * 100),
                currency=settings.payment_currency,
            ),
            customer_email=email,
            success_url=f"{client_url}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{client_url}/subscription",
            metadata={
                "planId": plan.id,
                "duration": str(minutes),
                "planName": plan.name,
            },
        )
        logger.info("Checkout session %s opened for %s (plan %s)", session.id, email, plan.name)
        return session

    async def complete_session(self, session_id: str) -> CompletedPayment:
        """
        Record a paid session and grant its subscription window.

        The window starts now and replaces any existing one. A session that was
        already recorded is acknowledged without further writes.

        Raises:
            PaymentNotCompletedError: If the provider does not report "paid"
        """
        session = await self.provider.retrieve_checkout_session(session_id)
        if not session.is_paid:
            raise PaymentNotCompletedError(
                f"Payment not successful (status={session.payment_status!r})"
            )

        existing = (
            await self.db.execute(select(Payment).where(Payment.session_id == session.id))
        ).scalar_one_or_none()
        if existing is not None:
            logger.info("Checkout session %s already recorded", session.id)
            return CompletedPayment(payment=existing, subscription_end=None, already_recorded=True)

        minutes = int(session.metadata.get("duration") or 0)
        email = session.customer_email

        payment = Payment(
            email=email,
            session_id=session.id,
            payment_id=session.payment_intent,
            plan_id=session.metadata.get("planId"),
            plan_name=session.metadata.get("planName"),
            subscription_time=minutes,
            amount=session.amount_total,
            status=PaymentStatus.SUCCESS.value,
        )
        self.db.add(payment)

        subscription_end = window_end(minutes)
        user = (
            await self.db.execute(select(User).where(User.email == email))
        ).scalar_one_or_none()
        if user is None:
            logger.warning("Paid session %s for unknown user %s", session.id, email)
        else:
            user.has_subscription = True
            user.subscription_end = subscription_end
            user.updated_at = datetime.now(UTC)

        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Recorded payment %s for %s: %d minutes until %s",
            payment.id,
            email,
            minutes,
            subscription_end.isoformat(),
        )
        return CompletedPayment(payment=payment, subscription_end=subscription_end)
