from dataclasses import dataclass
from typing import Optional

import stripe

from app.config import Settings
from app.exceptions import GatewayError
from app.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class CheckoutSession:
    id: str
    url: str = ""


class StripeGateway:
    """Creates one-time Checkout Sessions with the configured credential.

    Owns its own ``StripeClient`` so requests are bounded by the configured
    timeout without touching the library's module-level defaults.
    """

    def __init__(self, settings: Settings, client: Optional[stripe.StripeClient] = None):
        self.currency = settings.checkout_currency
        self.success_url = settings.checkout_success_url
        self.cancel_url = settings.checkout_cancel_url
        if client is None and settings.stripe_secret_key:
            client = stripe.StripeClient(
                settings.stripe_secret_key,
                http_client=stripe.RequestsClient(timeout=settings.stripe_timeout_seconds),
            )
        self.client = client

    def create_checkout_session(self, user_id: int, amount: int) -> CheckoutSession:
        if self.client is None:
            raise GatewayError("Stripe is not configured")

        try:
            session = self.client.checkout.sessions.create(params={
                "mode": "payment",
                "line_items": [{
                    "price_data": {
                        "currency": self.currency,
                        "unit_amount": amount,
                        "product_data": {"name": "Account balance top-up"},
                    },
                    "quantity": 1,
                }],
                "client_reference_id": str(user_id),
                "metadata": {"user_id": str(user_id)},
                "success_url": self.success_url,
                "cancel_url": self.cancel_url,
            })
        except stripe.StripeError as exc:
            logger.warning("stripe_checkout_failed", user_id=user_id, error=str(exc))
            raise GatewayError(
                "Payment gateway rejected or failed the request",
                details={"gateway_message": getattr(exc, "user_message", None) or str(exc)},
            ) from exc

        return CheckoutSession(id=session.id, url=getattr(session, "url", None) or "")
