# app/routers/orders.py
import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import (
    OrderCreate,
    OrderCreated,
    OrderListResponse,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderSummary,
    TrackingUpdate,
)
from app.services.notification_service import (
    NotificationDispatcher,
    get_notification_dispatcher,
)
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
product_repo = ProductRepository()
service = OrderService(order_repo, product_repo)


# -------- Customer-facing endpoints --------


@router.post(
    "",
    response_model=OrderCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Place an order (no account needed).

    Telegram / Sheets notifications run after the response is sent;
    their failure never affects the order.
    """
    order = service.create_order(session, payload)
    background_tasks.add_task(
        service.notify_order_created, dispatcher, session.get_bind(), order.id
    )
    return OrderCreated(
        message="Order received successfully",
        order=OrderSummary(
            id=order.id,
            order_number=order.order_number,
            total_price=order.total_price,
            status=order.status,
        ),
    )


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single order with items.
    """
    return service.get_order(session, order_id)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=OrderListResponse,
    dependencies=[Depends(require_admin)],
)
def list_orders(
    session: Session = Depends(get_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    status: OrderStatus | None = None,
    phone: str | None = None,
):
    """
    List orders newest first, optionally filtered by status or customer phone.
    """
    return service.list_orders(session, skip=skip, limit=limit, status=status, phone=phone)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Update order status (admin only).

      pending    -> confirmed, processing, cancelled

      confirmed  -> processing, shipped, cancelled

      processing -> shipped, cancelled

      shipped    -> delivered, cancelled

      delivered / cancelled are final.
    """
    order, old_status = service.update_status(session, order_id, payload)
    if order.status != old_status:
        background_tasks.add_task(
            service.notify_status_change,
            dispatcher,
            session.get_bind(),
            order.id,
            old_status,
            order.status,
        )
    return order


@router.put(
    "/{order_id}/tracking",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_tracking(
    order_id: uuid.UUID,
    payload: TrackingUpdate,
    session: Session = Depends(get_session),
):
    return service.add_tracking(session, order_id, payload)
