"""
Applies verified checkout completions to the ledger.

A completion credits the owning user's balance at most once per payment,
however many times and however concurrently the event is delivered. The guard
is the conditional ``pending -> completed`` update in the store; the balance
increment shares its transaction.
"""
from enum import Enum

from app.exceptions import ConflictError
from app.logging_config import get_logger
from app.models import COMPLETED
from app.store import PaymentStore
from app.webhooks import EventType, WebhookEvent

logger = get_logger(__name__)


class Outcome(str, Enum):
    CREDITED = "credited"
    ALREADY_COMPLETED = "already_completed"
    NOT_FOUND = "not_found"
    IGNORED = "ignored"


def reconcile(store: PaymentStore, event: WebhookEvent) -> Outcome:
    log = logger.bind(event_id=event.id, event_type=event.raw_type)

    if event.type is not EventType.CHECKOUT_SESSION_COMPLETED:
        log.info("webhook_ignored")
        return Outcome.IGNORED

    session_id = event.session_id
    log = log.bind(session_id=session_id)

    payment = store.get_by_session_id(session_id)
    if payment is None:
        log.warning("webhook_payment_not_found")
        return Outcome.NOT_FOUND

    if payment.status == COMPLETED:
        log.info("webhook_duplicate", payment_id=payment.id)
        return Outcome.ALREADY_COMPLETED

    payment_id, user_id, amount = payment.id, payment.user_id, payment.amount
    try:
        with store.transaction():
            store.mark_completed(session_id)
            store.credit_balance(user_id, amount)
    except ConflictError:
        # Another delivery completed it between our read and our write
        log.info("webhook_duplicate", payment_id=payment_id, raced=True)
        return Outcome.ALREADY_COMPLETED

    log.info("payment_credited", payment_id=payment_id, user_id=user_id, amount=amount)
    return Outcome.CREDITED
