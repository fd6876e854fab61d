# app/schemas/order.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.common import strip_or_none

PaymentMethod = Literal["cash", "payme", "click", "card"]
PaymentStatus = Literal["pending", "processing", "completed", "failed", "refunded"]
OrderStatus = Literal[
    "pending", "confirmed", "processing", "shipped", "delivered", "cancelled"
]

PAYMENT_METHODS: tuple[str, ...] = ("cash", "payme", "click", "card")


# -------- Create payload --------
#
# Required-ness of customer / delivery / items is checked by
# OrderService.validate_order_payload so the error messages come out
# in a fixed order; the schema only enforces shape.


class CustomerIn(SQLModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None

    @field_validator("name", "phone", "email")
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        return strip_or_none(v)


class DeliveryIn(SQLModel):
    address: str | None = None
    city: str | None = None
    region: str | None = None
    postal_code: str | None = None
    delivery_date: date | None = None
    delivery_time: str | None = None
    delivery_notes: str | None = None

    @field_validator(
        "address", "city", "region", "postal_code", "delivery_time", "delivery_notes"
    )
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        return strip_or_none(v)


class OrderItemIn(SQLModel):
    product_id: uuid.UUID
    name: str
    size: str
    price: float
    quantity: int
    image: str | None = None


class PaymentIn(SQLModel):
    method: str | None = None


class PricingIn(SQLModel):
    """
    Caller-supplied pricing.

    Only delivery_cost and discount are used; subtotal and total_price
    are accepted for compatibility and always recomputed.
    """

    subtotal: float | None = None
    delivery_cost: float | None = Field(default=None, ge=0)
    discount: float | None = Field(default=None, ge=0)
    total_price: float | None = None


class NotesIn(SQLModel):
    customer_notes: str | None = None


class OrderCreate(SQLModel):
    """
    Payload for placing an order.

    Backend derives:
      - order_number
      - status = 'pending', payment.status = 'pending'
      - subtotal / total_price from items
    """

    model_config = ConfigDict(extra="forbid")

    customer: CustomerIn | None = None
    delivery: DeliveryIn | None = None
    items: list[OrderItemIn] | None = None
    payment: PaymentIn | None = None
    pricing: PricingIn | None = None
    notes: NotesIn | None = None


# -------- Read models --------


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    product_id: uuid.UUID
    name: str
    size: str
    price: float
    quantity: int
    image: str | None
    line_total: float


class CustomerRead(SQLModel):
    name: str
    phone: str
    email: str | None


class DeliveryRead(SQLModel):
    address: str
    city: str
    region: str | None
    postal_code: str | None
    delivery_date: date | None
    delivery_time: str | None
    delivery_notes: str | None


class PaymentRead(SQLModel):
    method: PaymentMethod
    status: PaymentStatus
    transaction_id: str | None
    payment_date: datetime | None


class PricingRead(SQLModel):
    subtotal: float
    delivery_cost: float
    discount: float
    total_price: float


class NotesRead(SQLModel):
    customer_notes: str | None
    admin_notes: str | None


class TrackingRead(SQLModel):
    tracking_number: str | None
    courier_name: str | None
    courier_phone: str | None


class TimestampsRead(SQLModel):
    order_date: datetime
    confirmed_at: datetime | None
    shipped_at: datetime | None
    delivered_at: datetime | None
    cancelled_at: datetime | None


class NotificationsRead(SQLModel):
    telegram_sent: bool
    sheet_updated: bool
    customer_notified: bool


class OrderRead(SQLModel):
    """
    Full order view including items and derived counters.
    """

    id: uuid.UUID
    order_number: str
    items: list[OrderItemRead]
    customer: CustomerRead
    delivery: DeliveryRead
    payment: PaymentRead
    pricing: PricingRead
    status: OrderStatus
    notes: NotesRead
    tracking: TrackingRead
    timestamps: TimestampsRead
    notifications: NotificationsRead
    total_items: int
    order_age_days: int
    created_at: datetime
    updated_at: datetime


class OrderSummary(SQLModel):
    id: uuid.UUID
    order_number: str
    total_price: float
    status: OrderStatus


class OrderCreated(SQLModel):
    message: str
    order: OrderSummary


class OrderListResponse(SQLModel):
    orders: list[OrderRead]
    total: int


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    admin_notes: str | None = None

    @field_validator("admin_notes")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        return strip_or_none(v)


class TrackingUpdate(SQLModel):
    """
    Admin payload; replaces the whole tracking record.
    """

    model_config = ConfigDict(extra="forbid")

    tracking_number: str | None = None
    courier_name: str | None = None
    courier_phone: str | None = None
