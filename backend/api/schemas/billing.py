"""
Billing schemas: plans, checkout and payments.
"""

from typing import Optional

from pydantic import Field

from .common import CamelModel


class PlanCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    duration: int = Field(..., ge=1)
    duration_unit: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None


class PlanResponse(CamelModel):
    id: str
    name: str
    price: float
    duration: int
    duration_unit: str
    description: Optional[str] = None


class CheckoutRequest(CamelModel):
    """The buyer is always the token's email; a body email is ignored."""

    plan_id: str = Field(..., min_length=1)
    email: Optional[str] = None


class CheckoutResponse(CamelModel):
    success: bool = True
    session_id: str
    url: Optional[str] = None
