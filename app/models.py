from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.database import Base

PENDING = "pending"
COMPLETED = "completed"


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False)
    email = Column(String, nullable=False)
    balance = Column(Integer, nullable=False, default=0)  # minor units


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)               # minor units
    status = Column(String, nullable=False, default=PENDING)  # pending | completed
    external_session_id = Column(String, nullable=False, unique=True, index=True)  # Checkout Session ID
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
