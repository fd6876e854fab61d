# app/services/product_service.py
import logging
import math
import uuid
from datetime import timedelta

from sqlmodel import Session

from app.core.errors import NotFoundError, ValidationError
from app.core.identifiers import generate_sku, slugify
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    LowStockAlertResult,
    ProductCreate,
    ProductListResponse,
    ProductRead,
    ProductUpdate,
)
from app.services import catalog_rules
from app.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


def to_product_read(product: Product) -> ProductRead:
    return ProductRead(
        **product.model_dump(),
        discount_percentage=catalog_rules.discount_percentage(product),
        stock_status=catalog_rules.stock_status(product),
        main_image=catalog_rules.main_image(product),
    )


class ProductService:
    """
    Business logic for the catalog.

    Responsibilities:
      - slug uniqueness (derivations themselves run in the repository save)
      - stock adjustments and sale recording
      - running-average ratings
      - low-stock alert sweep
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    def _ensure_unique_slug(self, session: Session, base_slug: str) -> str:
        """
        Ensure slug is unique by appending -2, -3, ... if needed.
        """
        slug = base_slug
        i = 2
        while self.repo.get_by_slug(session, slug) is not None:
            slug = f"{base_slug}-{i}"
            i += 1
        return slug

    def _unique_sku(self, session: Session, product: Product) -> str:
        """
        Generated SKUs come from the creation millisecond; on a clash
        step the timestamp forward until the code is free.
        """
        offset = 0
        sku = generate_sku(product.category, product.created_at)
        while self.repo.get_by_sku(session, sku) is not None:
            offset += 1
            sku = generate_sku(
                product.category, product.created_at + timedelta(milliseconds=offset)
            )
        return sku

    # ----- Queries -----

    def list_products(
        self,
        session: Session,
        page: int = 1,
        limit: int = 12,
        category: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        search: str | None = None,
    ) -> ProductListResponse:
        filters = {
            "category": category,
            "min_price": min_price,
            "max_price": max_price,
            "search": search,
        }
        products = self.repo.list_active(
            session, skip=(page - 1) * limit, limit=limit, **filters
        )
        total = self.repo.count(session, **filters)
        logger.info("Found %d products out of %d total", len(products), total)

        return ProductListResponse(
            products=[to_product_read(p) for p in products],
            total_pages=math.ceil(total / limit),
            current_page=page,
            total=total,
        )

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    def list_featured(self, session: Session, limit: int = 12) -> list[ProductRead]:
        return [to_product_read(p) for p in self.repo.list_featured(session, limit)]

    def list_new(self, session: Session, limit: int = 12) -> list[ProductRead]:
        return [to_product_read(p) for p in self.repo.list_new(session, limit)]

    def list_best_sellers(self, session: Session, limit: int = 12) -> list[ProductRead]:
        return [to_product_read(p) for p in self.repo.list_best_sellers(session, limit)]

    def list_categories(self, session: Session) -> list[str]:
        return self.repo.list_categories(session)

    # ----- Admin writes -----

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        """
        Create a new product with a unique slug.

        - If slug is provided => slugify & ensure unique.
        - Else => slugify from name & ensure unique.
        - A provided SKU must not already exist.
        """
        base_slug = slugify(payload.slug or payload.name) or "product"
        slug = self._ensure_unique_slug(session, base_slug)

        if payload.sku and self.repo.get_by_sku(session, payload.sku):
            raise ValidationError(f"SKU already exists: {payload.sku}")

        product = Product(**payload.model_dump(exclude={"slug"}), slug=slug)
        if not product.sku:
            product.sku = self._unique_sku(session, product)
        return self.repo.save(session, product)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product.

        - If slug is changed, enforce uniqueness.
        """
        product = self.get_product(session, product_id)
        changes = payload.model_dump(exclude_unset=True)

        new_slug = changes.pop("slug", None)
        if new_slug is not None:
            new_base_slug = slugify(new_slug) or "product"
            if new_base_slug != product.slug:
                product.slug = self._ensure_unique_slug(session, new_base_slug)

        for field, value in changes.items():
            setattr(product, field, value)

        return self.repo.save(session, product)

    # ----- Inventory -----

    def update_stock(
        self,
        session: Session,
        product_id: uuid.UUID,
        quantity: int,
        operation: str = "subtract",
    ) -> Product:
        """
        subtract floors at zero; add increments. in_stock follows quantity.
        """
        if operation not in ("subtract", "add"):
            raise ValidationError(f"Unknown stock operation: {operation}")

        product = self.repo.adjust_stock(session, product_id, quantity, operation)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def record_sale(
        self,
        session: Session,
        product_id: uuid.UUID,
        quantity: int = 1,
    ) -> Product:
        """
        Bump total/week/month sales by `quantity` and subtract it from stock.
        Weekly / monthly counters are reset elsewhere.
        """
        product = self.repo.adjust_stock(
            session, product_id, quantity, "subtract", count_sale=True
        )
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def update_rating(
        self,
        session: Session,
        product_id: uuid.UUID,
        rating: float,
    ) -> Product:
        product = self.get_product(session, product_id)
        product.rating_average = catalog_rules.running_average(
            product.rating_average, product.rating_count, rating
        )
        product.rating_count += 1
        return self.repo.save(session, product)

    def send_low_stock_alerts(
        self,
        session: Session,
        dispatcher: NotificationDispatcher,
    ) -> LowStockAlertResult:
        """
        Stock monitor: alert on every active product that is low or out of stock.
        """
        products = self.repo.list_below_threshold(session)
        alerted = 0
        for product in products:
            if dispatcher.send_low_stock_alert(to_product_read(product)):
                alerted += 1
        logger.info("Low stock sweep: %d products, %d alerts sent", len(products), alerted)
        return LowStockAlertResult(checked=len(products), alerted=alerted)
