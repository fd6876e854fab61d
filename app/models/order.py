# app/models/order.py
import uuid
from datetime import datetime, date

from sqlmodel import SQLModel, Field

from app.core.clock import utcnow


class Order(SQLModel, table=True):
    """
    Customer order.

    Sub-records are flattened into prefixed columns:
      - customer_*, delivery_*, payment_*, pricing (subtotal, delivery_cost,
        discount, total_price), notes, tracking, lifecycle timestamps
        and notification flags.

    subtotal / total_price are recomputed from the line items on every
    save (see app.services.pricing).
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_number: str = Field(
        unique=True,
        index=True,
        description="Human readable order number, e.g. PKT482913057",
    )

    # ----- customer -----
    customer_name: str
    customer_phone: str = Field(index=True)
    customer_email: str | None = None

    # ----- delivery -----
    delivery_address: str
    delivery_city: str
    delivery_region: str | None = None
    delivery_postal_code: str | None = None
    delivery_date: date | None = None
    delivery_time: str | None = None
    delivery_notes: str | None = None

    # ----- payment -----
    # cash | payme | click | card
    payment_method: str = Field(default="cash")
    # pending | processing | completed | failed | refunded
    payment_status: str = Field(default="pending", index=True)
    payment_transaction_id: str | None = None
    payment_date: datetime | None = None

    # ----- pricing -----
    subtotal: float = Field(default=0, ge=0)
    delivery_cost: float = Field(default=50000, ge=0)
    discount: float = Field(default=0, ge=0)
    total_price: float = Field(default=0)

    # pending | confirmed | processing | shipped | delivered | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    # ----- notes -----
    customer_notes: str | None = None
    admin_notes: str | None = None

    # ----- tracking -----
    tracking_number: str | None = None
    courier_name: str | None = None
    courier_phone: str | None = None

    # ----- lifecycle timestamps -----
    order_date: datetime = Field(default_factory=utcnow)
    confirmed_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    # ----- notification bookkeeping (best-effort) -----
    telegram_sent: bool = Field(default=False)
    sheet_updated: bool = Field(default=False)
    customer_notified: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=utcnow,
        index=True,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(default_factory=utcnow)


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    name / size / price / image are snapshotted when the order is placed
    and are not touched by later catalog edits. product_id is a plain
    reference (no FK) so items outlive the catalog row.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(index=True)

    name: str
    size: str
    price: float = Field(ge=0, description="Unit price at time of order")
    quantity: int = Field(gt=0, description="Quantity ordered (>=1)")
    image: str | None = None

    position: int = Field(default=0, ge=0)
