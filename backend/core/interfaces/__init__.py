# Interfaces (Abstract Contracts)
# Adapters implement these interfaces
from .services import CheckoutItem, CheckoutProvider, CheckoutSession

__all__ = [
    "CheckoutItem",
    "CheckoutProvider",
    "CheckoutSession",
]
