# app/repositories/stats_repo.py
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.contact import Contact
from app.models.order import Order
from app.models.product import Product


class StatsRepository:
    """
    Read-only aggregated queries for admin dashboard.
    """

    def order_stats_by_status(self, session: Session) -> list[tuple]:
        """
        (status, order_count, total_amount) for every status present.
        """
        stmt = (
            select(
                Order.status,
                func.count(Order.id).label("order_count"),
                func.coalesce(func.sum(Order.total_price), 0.0).label("total_amount"),
            )
            .group_by(Order.status)
            .order_by(Order.status)
        )
        return list(session.exec(stmt).all())

    def count_orders(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Order)
        value = session.exec(stmt).one()
        return int(value or 0)

    def total_revenue(self, session: Session) -> float:
        """
        Sum of total_price for all non-cancelled orders.
        """
        stmt = (
            select(func.coalesce(func.sum(Order.total_price), 0.0))
            .where(Order.status != "cancelled")
        )
        value = session.exec(stmt).one()
        return float(value or 0.0)

    def count_contacts(self, session: Session, status: str) -> int:
        stmt = select(func.count()).select_from(Contact).where(Contact.status == status)
        value = session.exec(stmt).one()
        return int(value or 0)

    def top_products(self, session: Session, limit: int = 5) -> list[Product]:
        """
        Best sellers by lifetime units sold.
        """
        stmt = (
            select(Product)
            .where(Product.total_sold > 0)
            .order_by(Product.total_sold.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def latest_orders(self, session: Session, limit: int = 5) -> list[Order]:
        """
        Latest N orders by created_at (any status).
        """
        stmt = (
            select(Order)
            .order_by(Order.created_at.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    # ---- Daily summary ----

    def count_orders_since(
        self, session: Session, since: datetime, column: str = "created_at"
    ) -> int:
        """
        Orders whose `column` timestamp (created_at, confirmed_at, ...) is
        at or after `since`.
        """
        stamp = getattr(Order, column)
        stmt = select(func.count()).select_from(Order).where(stamp >= since)
        return int(session.exec(stmt).one() or 0)

    def revenue_since(self, session: Session, since: datetime) -> float:
        """
        Sum of total_price for non-cancelled orders placed at or after `since`.
        """
        stmt = (
            select(func.coalesce(func.sum(Order.total_price), 0.0))
            .where(Order.status != "cancelled")
            .where(Order.created_at >= since)
        )
        return float(session.exec(stmt).one() or 0.0)

    def count_contacts_since(
        self, session: Session, since: datetime, column: str = "created_at"
    ) -> int:
        stamp = getattr(Contact, column)
        stmt = select(func.count()).select_from(Contact).where(stamp >= since)
        return int(session.exec(stmt).one() or 0)
