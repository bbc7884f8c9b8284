"""
Billing database models: Plan and Payment.
"""

from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, CreatedAtMixin


class PaymentStatus(str, Enum):
    SUCCESS = "success"


class Plan(Base):
    """Subscription plan offered at checkout."""

    __tablename__ = "plans"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    # Free text: an unknown unit yields a plan that grants no time
    duration_unit: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Plan {self.name} {self.duration} {self.duration_unit}>"


class Payment(Base, CreatedAtMixin):
    """Append-only record of a completed checkout."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    payment_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    plan_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    plan_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    subscription_time: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minor units
    status: Mapped[str] = mapped_column(
        String(50),
        default=PaymentStatus.SUCCESS.value,
        nullable=False,
    )
