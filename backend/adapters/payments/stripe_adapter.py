"""
Stripe Checkout adapter.

Talks to Stripe's REST API over httpx for the two calls the payment flow
needs: opening a one-off Checkout Session and retrieving it after the
customer is redirected back.
"""

import logging
import re
from typing import Any

import httpx

from core.interfaces.services import CheckoutItem, CheckoutProvider, CheckoutSession
from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)

_SESSION_ID_RE = re.compile(r"cs_[A-Za-z0-9_]+")


# Custom Exceptions
class StripeError(Exception):
    """Base exception for Stripe adapter errors."""

    pass


class StripeAPIError(StripeError):
    """Raised when the Stripe API returns an error or cannot be reached."""

    pass


class StripeAuthError(StripeError):
    """Raised when no secret key is configured."""

    pass


def encode_form(data: dict[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """
    Flatten nested dicts/lists into Stripe's bracketed form encoding.

    >>> encode_form({"line_items": [{"quantity": 1}], "metadata": {"a": "b"}})
    [('line_items[0][quantity]', '1'), ('metadata[a]', 'b')]
    """
    pairs: list[tuple[str, str]] = []
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            pairs.extend(encode_form(value, name))
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                item_name = f"{name}[{index}]"
                if isinstance(item, dict):
                    pairs.extend(encode_form(item, item_name))
                else:
                    pairs.append((item_name, str(item)))
        elif isinstance(value, bool):
            pairs.append((name, "true" if value else "false"))
        else:
            pairs.append((name, str(value)))
    return pairs


def _session_from_api_response(data: dict[str, Any]) -> CheckoutSession:
    customer_email = data.get("customer_email")
    if not customer_email:
        customer_email = (data.get("customer_details") or {}).get("email")

    payment_intent = data.get("payment_intent")
    if isinstance(payment_intent, dict):
        payment_intent = payment_intent.get("id")

    return CheckoutSession(
        id=data.get("id", ""),
        payment_status=data.get("payment_status", ""),
        customer_email=customer_email,
        payment_intent=payment_intent,
        amount_total=data.get("amount_total"),
        url=data.get("url"),
        metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
    )


class StripeAdapter(CheckoutProvider):
    """
    Stripe Checkout implementation of the checkout provider interface.
    """

    def __init__(
        self,
        secret_key: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize Stripe adapter.

        Args:
            secret_key: Stripe secret key (defaults to settings)
            api_base: API base URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.secret_key = secret_key or settings.stripe_secret_key
        self.api_base = (api_base or settings.stripe_api_base).rstrip("/")
        self.timeout = timeout or settings.stripe_timeout

        if not self.secret_key:
            logger.warning("Stripe secret key not configured. Set STRIPE_SECRET_KEY.")

    def _get_headers(self) -> dict[str, str]:
        if not self.secret_key:
            raise StripeAuthError("Stripe secret key not configured. Set STRIPE_SECRET_KEY.")

        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/x-www-form-urlencoded",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make HTTP request to the Stripe API.

        Args:
            method: HTTP method (GET or POST)
            endpoint: API endpoint path
            data: Form body (for POST), flattened with bracket notation

        Returns:
            API response as dictionary

        Raises:
            StripeAPIError: If the request fails
        """
        url = f"{self.api_base}/{endpoint}"
        headers = self._get_headers()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                logger.info("Making %s request to %s", method, endpoint)

                if method == "GET":
                    response = await client.get(url, headers=headers)
                elif method == "POST":
                    response = await client.post(
                        url, headers=headers, data=dict(encode_form(data or {}))
                    )
                else:
                    raise ValueError(f"Unsupported HTTP method: {method}")

                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            error_detail = str(e)
            try:
                error_detail = e.response.json().get("error", {}).get("message", error_detail)
            except (ValueError, AttributeError):
                pass

            logger.error("Stripe API error: %s", error_detail)
            raise StripeAPIError(f"API request failed: {error_detail}") from e
        except httpx.RequestError as e:
            logger.error("HTTP request error: %s", e)
            raise StripeAPIError(f"Request failed: {e}") from e

    async def create_checkout_session(
        self,
        item: CheckoutItem,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutSession:
        """
        Open a one-off card payment Checkout Session.

        Returns:
            CheckoutSession with the provider id and hosted URL
        """
        body = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": item.currency,
                        "product_data": {
                            "name": item.name,
                            "description": item.description or None,
                        },
                        "unit_amount": item.unit_amount,
                    },
                    "quantity": item.quantity,
                }
            ],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "customer_email": customer_email,
            "metadata": metadata,
        }

        logger.info("Creating checkout session for %s", customer_email)
        response = await self._make_request("POST", "checkout/sessions", body)
        return _session_from_api_response(response)

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """Fetch a Checkout Session by id."""
        if not session_id:
            raise StripeError("Missing checkout session id")
        if not _SESSION_ID_RE.fullmatch(session_id):
            raise StripeError("Invalid checkout session id")

        logger.info("Retrieving checkout session %s", session_id)
        response = await self._make_request("GET", f"checkout/sessions/{session_id}")
        return _session_from_api_response(response)


# Factory function for easy instantiation
def create_stripe_adapter(
    secret_key: str | None = None,
    api_base: str | None = None,
) -> StripeAdapter:
    """
    Create a Stripe adapter instance.

    Args:
        secret_key: Stripe secret key (defaults to settings)
        api_base: API base URL (defaults to settings)

    Returns:
        StripeAdapter instance
    """
    return StripeAdapter(secret_key=secret_key, api_base=api_base)
