# app/services/order_service.py
import logging
import uuid
from datetime import datetime

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from app.core.clock import as_utc, utcnow
from app.core.config import get_settings
from app.core.errors import NotFoundError, PersistenceError, ValidationError
from app.core.identifiers import generate_order_number
from app.models.order import Order, OrderItem
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.common import is_valid_email, is_valid_phone
from app.schemas.order import (
    PAYMENT_METHODS,
    CustomerRead,
    DeliveryRead,
    NotesRead,
    NotificationsRead,
    OrderCreate,
    OrderItemRead,
    OrderListResponse,
    OrderRead,
    OrderStatusUpdate,
    PaymentRead,
    PricingRead,
    TimestampsRead,
    TrackingRead,
    TrackingUpdate,
)
from app.services.notification_service import NotificationDispatcher
from app.services.pricing import compute_pricing

logger = logging.getLogger(__name__)

# Allowed forward moves; cancellation is possible until delivery.
ORDER_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed", "processing", "cancelled"}),
    "confirmed": frozenset({"processing", "shipped", "cancelled"}),
    "processing": frozenset({"shipped", "cancelled"}),
    "shipped": frozenset({"delivered", "cancelled"}),
    "delivered": frozenset(),
    "cancelled": frozenset(),
}

# Status -> timestamp column stamped when entering it
STATUS_TIMESTAMPS: dict[str, str] = {
    "confirmed": "confirmed_at",
    "shipped": "shipped_at",
    "delivered": "delivered_at",
    "cancelled": "cancelled_at",
}


def validate_order_payload(
    payload: OrderCreate,
    default_delivery_cost: float,
) -> list[dict[str, str]]:
    """
    Collect every problem with an order payload.

    The first three checks (customer, delivery, items) always come first,
    in that order, so the leading message is stable for clients.
    """
    violations: list[dict[str, str]] = []

    customer = payload.customer
    if customer is None or not customer.name or not customer.phone:
        violations.append({"field": "customer", "message": "customer incomplete"})

    delivery = payload.delivery
    if delivery is None or not delivery.address or not delivery.city:
        violations.append({"field": "delivery", "message": "delivery incomplete"})

    items = payload.items or []
    if not items:
        violations.append({"field": "items", "message": "empty cart"})

    if customer is not None and customer.phone and not is_valid_phone(customer.phone):
        violations.append(
            {"field": "customer.phone", "message": "phone must match +998XXXXXXXXX"}
        )
    if customer is not None and customer.email and not is_valid_email(customer.email):
        violations.append({"field": "customer.email", "message": "invalid email format"})

    for i, item in enumerate(items):
        if item.price < 0:
            violations.append(
                {"field": f"items[{i}].price", "message": "price must be >= 0"}
            )
        if item.quantity < 1:
            violations.append(
                {"field": f"items[{i}].quantity", "message": "quantity must be >= 1"}
            )

    method = payload.payment.method if payload.payment else None
    if method and method not in PAYMENT_METHODS:
        violations.append(
            {"field": "payment.method", "message": f"unsupported payment method: {method}"}
        )

    pricing = payload.pricing
    if pricing is not None and pricing.discount:
        delivery_cost = (
            pricing.delivery_cost
            if pricing.delivery_cost is not None
            else default_delivery_cost
        )
        subtotal = compute_pricing(items, delivery_cost).subtotal
        if pricing.discount > subtotal + delivery_cost:
            violations.append(
                {
                    "field": "pricing.discount",
                    "message": "discount exceeds order total",
                }
            )

    return violations


def apply_status_transition(
    order: Order,
    new_status: str,
    admin_notes: str | None = None,
    now: datetime | None = None,
) -> Order:
    """
    Move an order to `new_status` and stamp the matching timestamp.
    Delivery also settles the payment.
    """
    now = now or utcnow()
    order.status = new_status
    if admin_notes:
        order.admin_notes = admin_notes

    column = STATUS_TIMESTAMPS.get(new_status)
    if column:
        setattr(order, column, now)
    if new_status == "delivered":
        order.payment_status = "completed"
    return order


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Validate and place orders (pricing is recomputed on save)
      - Allocate unique order numbers (retry on collision)
      - Record catalog sales for ordered products
      - Status transitions and tracking (admin)
      - Background notification jobs (Telegram + Sheets)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        order_number_prefix: str | None = None,
        max_number_attempts: int | None = None,
        default_delivery_cost: float | None = None,
        strict_transitions: bool | None = None,
    ):
        settings = get_settings()
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.order_number_prefix = order_number_prefix or settings.ORDER_NUMBER_PREFIX
        self.max_number_attempts = max_number_attempts or settings.ORDER_NUMBER_MAX_ATTEMPTS
        self.default_delivery_cost = (
            default_delivery_cost
            if default_delivery_cost is not None
            else settings.DEFAULT_DELIVERY_COST
        )
        self.strict_transitions = (
            strict_transitions
            if strict_transitions is not None
            else settings.ORDER_STRICT_TRANSITIONS
        )

    # -------- Customer-facing operations --------

    def create_order(self, session: Session, payload: OrderCreate) -> Order:
        """
        Place an order.

        Steps:
          1. Validate payload (nothing is written on failure).
          2. Snapshot line items.
          3. Persist with a fresh order number; retry on collision.
          4. Record sales on the ordered catalog products.
        """
        violations = validate_order_payload(payload, self.default_delivery_cost)
        if violations:
            raise ValidationError(violations[0]["message"], violations)

        customer, delivery = payload.customer, payload.delivery
        pricing = payload.pricing
        delivery_cost = self.default_delivery_cost
        discount = 0.0
        if pricing is not None:
            if pricing.delivery_cost is not None:
                # An explicit 0 means free delivery; only a missing value
                # falls back to the default.
                delivery_cost = pricing.delivery_cost
            discount = pricing.discount or 0.0

        order = Order(
            order_number="",
            customer_name=customer.name,
            customer_phone=customer.phone,
            customer_email=customer.email.lower() if customer.email else None,
            delivery_address=delivery.address,
            delivery_city=delivery.city,
            delivery_region=delivery.region,
            delivery_postal_code=delivery.postal_code,
            delivery_date=delivery.delivery_date,
            delivery_time=delivery.delivery_time,
            delivery_notes=delivery.delivery_notes,
            payment_method=(payload.payment.method if payload.payment else None) or "cash",
            payment_status="pending",
            delivery_cost=delivery_cost,
            discount=discount,
            customer_notes=payload.notes.customer_notes if payload.notes else None,
            status="pending",
        )
        items = [
            OrderItem(
                order_id=order.id,
                product_id=item.product_id,
                name=item.name,
                size=item.size,
                price=item.price,
                quantity=item.quantity,
                image=item.image,
            )
            for item in payload.items
        ]

        for attempt in range(1, self.max_number_attempts + 1):
            order.order_number = generate_order_number(self.order_number_prefix)
            try:
                order = self.order_repo.create_order(session, order, items)
                break
            except IntegrityError:
                session.rollback()
                logger.warning(
                    "Order number %s collided (attempt %d/%d)",
                    order.order_number,
                    attempt,
                    self.max_number_attempts,
                )
        else:
            raise PersistenceError("Could not allocate a unique order number")

        logger.info("Order saved: %s", order.order_number)
        self._record_sales(session, items)
        return order

    def _record_sales(self, session: Session, items: list[OrderItem]) -> None:
        for item in items:
            try:
                product = self.product_repo.adjust_stock(
                    session, item.product_id, item.quantity, "subtract", count_sale=True
                )
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Recording sale failed for product %s", item.product_id)
                continue
            if product is None:
                logger.info("Ordered product %s is not in the catalog", item.product_id)

    def get_order(self, session: Session, order_id: uuid.UUID) -> OrderRead:
        return self.build_order_read(session, self._get(session, order_id))

    # -------- Admin operations --------

    def list_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
        phone: str | None = None,
    ) -> OrderListResponse:
        orders = self.order_repo.list_orders(
            session, skip=skip, limit=limit, status=status, phone=phone
        )
        return OrderListResponse(
            orders=[self.build_order_read(session, o) for o in orders],
            total=self.order_repo.count(session, status=status, phone=phone),
        )

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> tuple[OrderRead, str]:
        """
        Admin-only status update.

        With strict transitions (default) only moves listed in
        ORDER_TRANSITIONS are allowed; anything else raises 400.
        Re-submitting the current status only updates admin notes.

        Returns the updated order and the previous status.
        """
        order = self._get(session, order_id)
        old_status = order.status
        new_status = payload.status

        if new_status == old_status:
            if payload.admin_notes:
                order.admin_notes = payload.admin_notes
                order = self.order_repo.save(session, order)
            return self.build_order_read(session, order), old_status

        if self.strict_transitions and new_status not in ORDER_TRANSITIONS[old_status]:
            raise ValidationError(
                f"Invalid status transition: {old_status} -> {new_status}"
            )

        apply_status_transition(order, new_status, payload.admin_notes)
        order = self.order_repo.save(session, order)
        logger.info("Order %s: %s -> %s", order.order_number, old_status, new_status)
        return self.build_order_read(session, order), old_status

    def add_tracking(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: TrackingUpdate,
    ) -> OrderRead:
        """
        Replace the tracking record wholesale (omitted fields are cleared).
        """
        order = self._get(session, order_id)
        order.tracking_number = payload.tracking_number
        order.courier_name = payload.courier_name
        order.courier_phone = payload.courier_phone
        order = self.order_repo.save(session, order)
        return self.build_order_read(session, order)

    # -------- Background jobs --------
    #
    # Run by FastAPI BackgroundTasks after the response is sent, with
    # their own session. They log failures and never raise.

    def notify_order_created(
        self,
        dispatcher: NotificationDispatcher,
        bind: Engine,
        order_id: uuid.UUID,
    ) -> None:
        with Session(bind) as session:
            order = self.order_repo.get_by_id(session, order_id)
            if order is None:
                logger.warning("Order %s vanished before notification", order_id)
                return

            dto = self.build_order_read(session, order)
            order.telegram_sent = dispatcher.send_order_notification(dto)
            order.sheet_updated = dispatcher.log_order(dto)
            try:
                self.order_repo.save(session, order)
            except SQLAlchemyError:
                logger.exception(
                    "Could not store notification flags for order %s",
                    order.order_number,
                )

    def notify_status_change(
        self,
        dispatcher: NotificationDispatcher,
        bind: Engine,
        order_id: uuid.UUID,
        old_status: str,
        new_status: str,
    ) -> None:
        with Session(bind) as session:
            order = self.order_repo.get_by_id(session, order_id)
            if order is None:
                return
            dispatcher.send_order_status_update(
                self.build_order_read(session, order), old_status, new_status
            )

    # -------- Helpers --------

    def _get(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    def build_order_read(self, session: Session, order: Order) -> OrderRead:
        """
        Compose the nested OrderRead view from the flat ORM rows.
        """
        items = self.order_repo.list_items_for_order(session, order.id)
        order_date = as_utc(order.order_date)

        return OrderRead(
            id=order.id,
            order_number=order.order_number,
            items=[
                OrderItemRead(
                    product_id=it.product_id,
                    name=it.name,
                    size=it.size,
                    price=it.price,
                    quantity=it.quantity,
                    image=it.image,
                    line_total=it.price * it.quantity,
                )
                for it in items
            ],
            customer=CustomerRead(
                name=order.customer_name,
                phone=order.customer_phone,
                email=order.customer_email,
            ),
            delivery=DeliveryRead(
                address=order.delivery_address,
                city=order.delivery_city,
                region=order.delivery_region,
                postal_code=order.delivery_postal_code,
                delivery_date=order.delivery_date,
                delivery_time=order.delivery_time,
                delivery_notes=order.delivery_notes,
            ),
            payment=PaymentRead(
                method=order.payment_method,
                status=order.payment_status,
                transaction_id=order.payment_transaction_id,
                payment_date=order.payment_date,
            ),
            pricing=PricingRead(
                subtotal=order.subtotal,
                delivery_cost=order.delivery_cost,
                discount=order.discount,
                total_price=order.total_price,
            ),
            status=order.status,
            notes=NotesRead(
                customer_notes=order.customer_notes,
                admin_notes=order.admin_notes,
            ),
            tracking=TrackingRead(
                tracking_number=order.tracking_number,
                courier_name=order.courier_name,
                courier_phone=order.courier_phone,
            ),
            timestamps=TimestampsRead(
                order_date=order_date,
                confirmed_at=as_utc(order.confirmed_at),
                shipped_at=as_utc(order.shipped_at),
                delivered_at=as_utc(order.delivered_at),
                cancelled_at=as_utc(order.cancelled_at),
            ),
            notifications=NotificationsRead(
                telegram_sent=order.telegram_sent,
                sheet_updated=order.sheet_updated,
                customer_notified=order.customer_notified,
            ),
            total_items=sum(it.quantity for it in items),
            order_age_days=(utcnow() - order_date).days,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
