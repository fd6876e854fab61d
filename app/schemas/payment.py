# app/schemas/payment.py
import uuid

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class PaymentRequest(SQLModel):
    """
    Payload for starting a payment.

    payment_method is a plain string so unknown methods reach the service
    and fail with UnsupportedMethodError instead of a schema error.
    amount defaults to the order's total_price when omitted.
    """

    model_config = ConfigDict(extra="forbid")

    order_id: uuid.UUID
    payment_method: str
    amount: float | None = Field(default=None, gt=0)


class PaymentInitiated(SQLModel):
    message: str
    order_id: uuid.UUID
    payment_method: str
    payment_status: str
    payment_url: str | None
