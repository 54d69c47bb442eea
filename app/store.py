"""
Persistence for users, payments and balances.

Reads and single-row writes commit on their own. The two reconciliation writes
(``mark_completed`` and ``credit_balance``) are only issued inside
``PaymentStore.transaction`` so they land together or not at all.
"""
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, StorageError
from app.models import COMPLETED, PENDING, Payment, User


class PaymentStore:
    def __init__(self, db: Session):
        self.db = db

    # --- users ---

    def get_user(self, user_id: int) -> Optional[User]:
        try:
            return self.db.get(User, user_id)
        except SQLAlchemyError as exc:
            raise StorageError("Could not load user", details={"user_id": user_id}) from exc

    def create_user(self, username: str, email: str) -> User:
        user = User(username=username, email=email, balance=0)
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Could not create user") from exc
        return user

    def list_users(self) -> List[User]:
        try:
            return list(self.db.scalars(select(User).order_by(User.id)))
        except SQLAlchemyError as exc:
            raise StorageError("Could not list users") from exc

    # --- payments ---

    def get_by_session_id(self, session_id: str) -> Optional[Payment]:
        try:
            return self.db.scalars(
                select(Payment).where(Payment.external_session_id == session_id)
            ).first()
        except SQLAlchemyError as exc:
            raise StorageError(
                "Could not load payment", details={"session_id": session_id}
            ) from exc

    def create_pending(self, user_id: int, amount: int, session_id: str) -> Payment:
        payment = Payment(
            user_id=user_id,
            amount=amount,
            status=PENDING,
            external_session_id=session_id,
        )
        try:
            self.db.add(payment)
            self.db.commit()
            self.db.refresh(payment)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(
                "Could not record pending payment", details={"session_id": session_id}
            ) from exc
        return payment

    def mark_completed(self, session_id: str) -> None:
        """Conditional pending -> completed transition.

        Raises ConflictError when no pending row matched, i.e. another delivery
        already completed it.
        """
        result = self.db.execute(
            update(Payment)
            .where(
                Payment.external_session_id == session_id,
                Payment.status == PENDING,
            )
            .values(status=COMPLETED)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError(
                "Payment is not pending", details={"session_id": session_id}
            )

    def credit_balance(self, user_id: int, amount: int) -> None:
        result = self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(balance=User.balance + amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StorageError(
                "Owning user missing while crediting balance",
                details={"user_id": user_id},
            )

    @contextmanager
    def transaction(self) -> Iterator["PaymentStore"]:
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Transaction failed", details={"reason": str(exc)}) from exc
        except Exception:
            self.db.rollback()
            raise
