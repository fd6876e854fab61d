# app/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    LowStockAlertResult,
    ProductCreate,
    ProductListResponse,
    ProductRead,
    ProductUpdate,
    RatingCreate,
    StockUpdate,
)
from app.services.notification_service import (
    NotificationDispatcher,
    get_notification_dispatcher,
)
from app.services.product_service import ProductService, to_product_read

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Public endpoints --------


@router.get("", response_model=ProductListResponse)
def list_products(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    category: str | None = None,
    min_price: float | None = Query(None, alias="minPrice"),
    max_price: float | None = Query(None, alias="maxPrice"),
    search: str | None = None,
):
    """
    List active products, newest first.

    - `category=all` (or omitted) disables the category filter.
    - `search` matches name or description, case-insensitive.
    """
    return service.list_products(
        session,
        page=page,
        limit=limit,
        category=category,
        min_price=min_price,
        max_price=max_price,
        search=search,
    )


# Fixed paths go before /{product_id}


@router.get("/featured", response_model=list[ProductRead])
def list_featured(
    limit: int = Query(12, ge=1, le=100),
    session: Session = Depends(get_session),
):
    return service.list_featured(session, limit)


@router.get("/new", response_model=list[ProductRead])
def list_new(
    limit: int = Query(12, ge=1, le=100),
    session: Session = Depends(get_session),
):
    return service.list_new(session, limit)


@router.get("/bestsellers", response_model=list[ProductRead])
def list_best_sellers(
    limit: int = Query(12, ge=1, le=100),
    session: Session = Depends(get_session),
):
    return service.list_best_sellers(session, limit)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single product by id.
    """
    return to_product_read(service.get_product(session, product_id))


@router.post("/{product_id}/rating", response_model=ProductRead)
def rate_product(
    product_id: uuid.UUID,
    payload: RatingCreate,
    session: Session = Depends(get_session),
):
    """
    Fold one rating (0-5) into the running average.
    """
    return to_product_read(service.update_rating(session, product_id, payload.rating))


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only).
    """
    return to_product_read(service.create_product(session, payload))


@router.patch(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product (admin only).
    """
    return to_product_read(service.update_product(session, product_id, payload))


@router.post(
    "/{product_id}/stock",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_stock(
    product_id: uuid.UUID,
    payload: StockUpdate,
    session: Session = Depends(get_session),
):
    """
    Add to or subtract from stock on hand (subtract floors at zero).
    """
    product = service.update_stock(
        session, product_id, payload.quantity, payload.operation
    )
    return to_product_read(product)


@router.post(
    "/low-stock/alerts",
    response_model=LowStockAlertResult,
    dependencies=[Depends(require_admin)],
)
def send_low_stock_alerts(
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Send a Telegram alert for every active product at or below its threshold.
    """
    return service.send_low_stock_alerts(session, dispatcher)
