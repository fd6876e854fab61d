# app/repositories/order_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from app.core.clock import utcnow
from app.models.order import Order, OrderItem
from app.services.pricing import apply_pricing


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - Pricing (subtotal / total_price) is recomputed from the items
        on every write; values set by callers are overwritten.
    """

    # ---- Orders ----

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def _filtered(self, stmt, status: str | None = None, phone: str | None = None):
        if status:
            stmt = stmt.where(Order.status == status)
        if phone:
            stmt = stmt.where(Order.customer_phone == phone)
        return stmt

    def list_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
        phone: str | None = None,
    ) -> list[Order]:
        stmt = self._filtered(select(Order), status=status, phone=phone)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def count(
        self,
        session: Session,
        status: str | None = None,
        phone: str | None = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(Order), status=status, phone=phone
        )
        return int(session.exec(stmt).one() or 0)

    def create_order(
        self,
        session: Session,
        order: Order,
        items: list[OrderItem],
    ) -> Order:
        """
        Insert an order with its items in one transaction.

        Raises sqlalchemy IntegrityError on a duplicate order_number; the
        caller rolls back and retries with a new number.
        """
        for position, item in enumerate(items):
            item.order_id = order.id
            item.position = position

        apply_pricing(order, items)
        session.add(order)
        session.add_all(items)
        session.commit()
        session.refresh(order)
        return order

    def save(self, session: Session, order: Order) -> Order:
        items = self.list_items_for_order(session, order.id)
        apply_pricing(order, items)
        order.updated_at = utcnow()
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
        )
        return list(session.exec(stmt).all())
