from typing import Union

from app.exceptions import NotFoundError, StorageError, ValidationError
from app.logging_config import get_logger
from app.store import PaymentStore
from app.stripe_service import StripeGateway

logger = get_logger(__name__)

# Largest unit_amount Stripe accepts
MAX_AMOUNT = 99_999_999


def parse_amount(value: Union[int, str]) -> int:
    """Amounts are positive integers in minor units, sent as int or digit string."""
    if isinstance(value, bool):
        raise ValidationError("Amount must be an integer", details={"amount": value})
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        digits = value.strip().lstrip("0") or "0"
        # Longer than MAX_AMOUNT is out of range whatever the digits
        amount = int(digits) if len(digits) <= len(str(MAX_AMOUNT)) else MAX_AMOUNT + 1
    else:
        raise ValidationError(
            "Amount must be an integer number of minor units", details={"amount": value}
        )

    if amount <= 0:
        raise ValidationError("Amount must be positive", details={"amount": value})
    if amount > MAX_AMOUNT:
        raise ValidationError(
            "Amount exceeds the maximum of %d minor units" % MAX_AMOUNT,
            details={"amount": value},
        )
    return amount


def initiate_payment(
    store: PaymentStore,
    gateway: StripeGateway,
    user_id: int,
    amount: Union[int, str],
) -> str:
    """Open a Checkout Session and record the pending payment behind it.

    Returns the external session id.
    """
    minor_units = parse_amount(amount)
    if store.get_user(user_id) is None:
        raise NotFoundError("User not found", details={"user_id": user_id})

    session = gateway.create_checkout_session(user_id, minor_units)

    try:
        payment = store.create_pending(user_id, minor_units, session.id)
    except StorageError:
        # The Checkout Session exists at Stripe but has no local row.
        # A later completion webhook for it will be acknowledged as not found.
        logger.error(
            "orphaned_checkout_session",
            session_id=session.id,
            user_id=user_id,
            amount=minor_units,
        )
        raise

    logger.info(
        "checkout_session_created",
        payment_id=payment.id,
        session_id=session.id,
        user_id=user_id,
        amount=minor_units,
    )
    return session.id
