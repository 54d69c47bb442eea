"""
Verification and decoding of Stripe webhook deliveries.

The signature is checked against the raw request bytes exactly as received.
``stripe.Webhook.construct_event`` recomputes HMAC-SHA256 over
``"{timestamp}.{body}"``, compares in constant time and rejects timestamps
outside the tolerance window.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import stripe

from app.exceptions import (
    ConfigurationError,
    SignatureVerificationError,
    WebhookPayloadError,
)


class EventType(str, Enum):
    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    OTHER = "other"


@dataclass(frozen=True)
class WebhookEvent:
    id: Optional[str]
    type: EventType
    raw_type: str
    session_id: Optional[str] = None


def verify_webhook(
    payload: bytes,
    signature: Optional[str],
    secret: Optional[str],
    tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
) -> WebhookEvent:
    if not secret:
        raise ConfigurationError("Webhook secret is not configured")
    if not signature:
        raise SignatureVerificationError("Missing Stripe-Signature header")

    try:
        event = stripe.Webhook.construct_event(payload, signature, secret, tolerance=tolerance)
    except ValueError as exc:
        raise WebhookPayloadError("Invalid payload") from exc
    except stripe.SignatureVerificationError as exc:
        raise SignatureVerificationError("Invalid signature") from exc

    return decode_event(event)


def decode_event(event) -> WebhookEvent:
    try:
        raw_type = event["type"]
    except (KeyError, TypeError) as exc:
        raise WebhookPayloadError("Event has no type") from exc

    try:
        event_id = event["id"]
    except KeyError:
        event_id = None

    if raw_type != EventType.CHECKOUT_SESSION_COMPLETED.value:
        return WebhookEvent(id=event_id, type=EventType.OTHER, raw_type=raw_type)

    try:
        session_id = event["data"]["object"]["id"]
    except (KeyError, TypeError) as exc:
        raise WebhookPayloadError("Checkout event has no session id") from exc
    if not isinstance(session_id, str) or not session_id:
        raise WebhookPayloadError("Checkout event has no session id")

    return WebhookEvent(
        id=event_id,
        type=EventType.CHECKOUT_SESSION_COMPLETED,
        raw_type=raw_type,
        session_id=session_id,
    )
