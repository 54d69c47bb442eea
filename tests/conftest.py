import hashlib
import hmac
import json
import os
import time

# Settings are read once, so the environment must be in place before app imports
os.environ["DATABASE_URL"] = "sqlite:///./test_app.db"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
os.environ["JWT_SECRET"] = "test-jwt-secret"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.exceptions import GatewayError
from app.main import app as fastapi_app
from app.models import User
from app.routes import get_gateway
from app.store import PaymentStore
from app.stripe_service import CheckoutSession
import app.auth

WEBHOOK_SECRET = "whsec_test"


class FakeGateway:
    """Stands in for StripeGateway and hands out sequential session ids."""

    def __init__(self):
        self.calls = []
        self.error = None

    def create_checkout_session(self, user_id, amount):
        self.calls.append((user_id, amount))
        if self.error is not None:
            raise self.error
        return CheckoutSession(id=f"cs_test_{len(self.calls)}", url="https://checkout.test")

    def fail_with(self, message="Stripe Service Unavailable"):
        self.error = GatewayError(message)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return PaymentStore(db)


@pytest.fixture
def make_user(db):
    def _make_user(username="alice", balance=0):
        user = User(username=username, email=f"{username}@example.com", balance=balance)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(gateway):
    # Bypass auth verification for tests
    fastapi_app.dependency_overrides[app.auth.verify_token] = lambda: True
    fastapi_app.dependency_overrides[get_gateway] = lambda: gateway

    with TestClient(fastapi_app) as c:
        yield c

    fastapi_app.dependency_overrides.clear()


def sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode() + payload
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def completed_event(session_id: str, event_id: str = "evt_test_1") -> bytes:
    return json.dumps({
        "id": event_id,
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": {"id": session_id, "object": "checkout.session"}},
    }).encode()


@pytest.fixture
def signer():
    return sign


@pytest.fixture
def completed_payload():
    return completed_event
