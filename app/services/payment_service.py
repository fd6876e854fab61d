# app/services/payment_service.py
import logging
from functools import lru_cache

from sqlmodel import Session

from app.core.errors import NotFoundError, UnsupportedMethodError
from app.core.payment_providers import PaymentGateway
from app.repositories.order_repo import OrderRepository
from app.schemas.order import PAYMENT_METHODS
from app.schemas.payment import PaymentInitiated, PaymentRequest

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Starts a payment for an existing order.

    The method is checked before the order is touched; a provider failure
    also leaves the order unchanged.
    """

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    def initiate(
        self,
        session: Session,
        payload: PaymentRequest,
        gateway: PaymentGateway,
    ) -> PaymentInitiated:
        method = payload.payment_method
        if method not in PAYMENT_METHODS:
            raise UnsupportedMethodError(method)

        order = self.order_repo.get_by_id(session, payload.order_id)
        if not order:
            raise NotFoundError("Order", payload.order_id)

        amount = payload.amount or order.total_price
        payment_url = gateway.redirect_url(method, order.id, amount)

        order.payment_method = method
        order.payment_status = "processing"
        order = self.order_repo.save(session, order)
        logger.info("Payment started for %s via %s", order.order_number, method)

        return PaymentInitiated(
            message="Payment initiated",
            order_id=order.id,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            payment_url=payment_url,
        )


@lru_cache
def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway.from_settings()
