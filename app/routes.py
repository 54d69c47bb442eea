from datetime import datetime
from functools import lru_cache
from typing import List, Union

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr
from sqlalchemy.orm import Session

from app.auth import verify_token
from app.checkout import initiate_payment
from app.config import Settings, get_settings
from app.database import get_db
from app.exceptions import NotFoundError
from app.reconciliation import reconcile
from app.store import PaymentStore
from app.stripe_service import StripeGateway
from app.webhooks import verify_webhook

router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> PaymentStore:
    return PaymentStore(db)


@lru_cache
def get_gateway() -> StripeGateway:
    """One gateway, and so one HTTP client, per process."""
    return StripeGateway(get_settings())


class UserCreate(BaseModel):
    username: str
    email: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    balance: int


class PaymentRequest(BaseModel):
    user_id: int
    # Strict so JSON booleans and floats are rejected rather than coerced
    amount: Union[StrictInt, StrictStr]


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: int
    status: str
    external_session_id: str
    created_at: datetime


@router.post("/user/create", response_model=UserOut)
def create_user(
    request: UserCreate,
    store: PaymentStore = Depends(get_store),
    auth=Depends(verify_token),
):
    return store.create_user(request.username, request.email)


@router.get("/user/list", response_model=List[UserOut])
def list_users(store: PaymentStore = Depends(get_store), auth=Depends(verify_token)):
    return store.list_users()


@router.post("/payments/initiate")
def initiate_payment_api(
    request: PaymentRequest,
    store: PaymentStore = Depends(get_store),
    gateway: StripeGateway = Depends(get_gateway),
    auth=Depends(verify_token),
):
    session_id = initiate_payment(store, gateway, request.user_id, request.amount)
    return {"session_id": session_id}


@router.get("/payments/{session_id}", response_model=PaymentOut)
def get_payment(
    session_id: str,
    store: PaymentStore = Depends(get_store),
    auth=Depends(verify_token),
):
    payment = store.get_by_session_id(session_id)
    if payment is None:
        raise NotFoundError("Payment not found", details={"session_id": session_id})
    return payment


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    store: PaymentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    payload = await request.body()

    event = verify_webhook(
        payload,
        stripe_signature,
        settings.stripe_webhook_secret,
        tolerance=settings.webhook_tolerance_seconds,
    )
    await run_in_threadpool(reconcile, store, event)

    return {"received": True}
