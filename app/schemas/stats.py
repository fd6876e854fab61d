# app/schemas/stats.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel

from app.schemas.order import OrderStatus


class OrderStatusStats(SQLModel):
    """
    Order count and amount per status.
    """
    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    order_count: int
    total_amount: float


class TopProduct(SQLModel):
    """
    Best-selling products by lifetime units sold.
    """
    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    name: str
    total_sold: int
    week_sales: int
    month_sales: int


class LatestOrderSummary(SQLModel):
    """
    Lightweight info for last N orders.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    order_number: str
    created_at: datetime
    customer_name: str
    total_price: float
    status: OrderStatus


class AdminDashboardStats(SQLModel):
    """
    Full payload for admin dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    total_orders: int
    total_revenue: float
    unread_contacts: int
    orders_by_status: list[OrderStatusStats]
    top_products: list[TopProduct]
    latest_orders: list[LatestOrderSummary]


class DailyOrderCounts(SQLModel):
    """
    Orders placed today, and orders that reached each status today.
    """
    new: int = 0
    confirmed: int = 0
    delivered: int = 0
    cancelled: int = 0


class DailyRevenue(SQLModel):
    today: float = 0.0
    week: float = 0.0


class DailyContactCounts(SQLModel):
    new: int = 0
    replied: int = 0


class DailyTopSeller(SQLModel):
    name: str
    sold: int


class DailySummary(SQLModel):
    """
    Daily report sent to the admin chat.
    """
    model_config = ConfigDict(extra="forbid")

    date: datetime
    orders: DailyOrderCounts
    revenue: DailyRevenue
    contacts: DailyContactCounts
    top_products: list[DailyTopSeller]


class DailySummaryResult(SQLModel):
    sent: bool
    summary: DailySummary
