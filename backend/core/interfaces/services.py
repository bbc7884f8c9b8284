"""Service interfaces for external integrations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class CheckoutItem:
    """Single priced line shown on the hosted checkout page."""

    name: str
    description: str | None
    unit_amount: int  # minor currency units
    currency: str = "usd"
    quantity: int = 1


@dataclass
class CheckoutSession:
    """Provider-side checkout session, as far as this service cares."""

    id: str
    payment_status: str  # "paid", "unpaid", "no_payment_required"
    customer_email: str | None = None
    payment_intent: str | None = None
    amount_total: int | None = None
    url: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


class CheckoutProvider(ABC):
    """Abstract hosted-checkout payment provider."""

    @abstractmethod
    async def create_checkout_session(
        self,
        item: CheckoutItem,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutSession:
        """Open a one-off payment session and return it."""
        ...

    @abstractmethod
    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """Fetch a session by id, including its payment state and metadata."""
        ...
