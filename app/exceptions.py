"""
Error taxonomy for the payment service.

Every error carries the HTTP status it is reported with, so routes only raise
and a single handler in ``app.main`` renders the response.
"""

from typing import Any, Optional


class PaymentServiceError(Exception):
    """Base exception for all payment service errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(PaymentServiceError):
    """Bad input. Raised before any side effect is attempted."""

    status_code = 422


class WebhookPayloadError(ValidationError):
    """Webhook body could not be decoded into an event."""

    status_code = 400


class SignatureVerificationError(PaymentServiceError):
    """Webhook authenticity check failed."""

    status_code = 400


class NotFoundError(PaymentServiceError):
    """Referenced payment or user does not exist."""

    status_code = 404


class GatewayError(PaymentServiceError):
    """The payment gateway call failed, was rejected or timed out."""

    status_code = 502


class StorageError(PaymentServiceError):
    """A durable read or write failed."""

    status_code = 500


class ConfigurationError(PaymentServiceError):
    """A required setting is missing. Reported as a server error."""

    status_code = 500


class ConflictError(PaymentServiceError):
    """A conditional transition matched no row.

    Internal only: reconciliation turns it into an idempotent no-op.
    """

    status_code = 409
