"""Payment adapters for hosted checkout."""

from .stripe_adapter import (
    StripeAdapter,
    StripeAPIError,
    StripeAuthError,
    StripeError,
    create_stripe_adapter,
    encode_form,
)

__all__ = [
    "StripeAdapter",
    "StripeError",
    "StripeAPIError",
    "StripeAuthError",
    "create_stripe_adapter",
    "encode_form",
]
