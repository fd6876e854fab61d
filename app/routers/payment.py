# app/routers/payment.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.payment_providers import PaymentGateway
from app.database import get_session
from app.repositories.order_repo import OrderRepository
from app.schemas.payment import PaymentInitiated, PaymentRequest
from app.services.payment_service import PaymentService, get_payment_gateway

router = APIRouter(prefix="/payment", tags=["Payment"])

order_repo = OrderRepository()
service = PaymentService(order_repo)


@router.post("", response_model=PaymentInitiated)
def initiate_payment(
    payload: PaymentRequest,
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Start a payment for an order.

    - click / payme => `payment_url` to redirect the customer to
    - cash / card   => no URL; settled on delivery
    """
    return service.initiate(session, payload, gateway)
