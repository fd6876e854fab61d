# app/repositories/product_repo.py
import uuid

from sqlalchemy import case, func, or_, update
from sqlmodel import Session, select

from app.core.clock import utcnow
from app.models.product import Product
from app.services.catalog_rules import NEW_PRODUCT_WINDOW, prepare_for_save


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - Every save runs the catalog derivations first.
    - Stock changes are single UPDATE statements so concurrent sales
      never read-then-write the quantity.
    """

    # ----- Lookups -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_slug(self, session: Session, slug: str) -> Product | None:
        stmt = select(Product).where(Product.slug == slug)
        return session.exec(stmt).first()

    def get_by_sku(self, session: Session, sku: str) -> Product | None:
        stmt = select(Product).where(Product.sku == sku)
        return session.exec(stmt).first()

    def _active_filter(
        self,
        stmt,
        category: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        search: str | None = None,
    ):
        stmt = stmt.where(Product.status == "active")
        if category and category != "all":
            stmt = stmt.where(Product.category == category)
        if min_price is not None:
            stmt = stmt.where(Product.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Product.price <= max_price)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Product.name).like(pattern),
                    func.lower(Product.description).like(pattern),
                )
            )
        return stmt

    def list_active(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 12,
        **filters,
    ) -> list[Product]:
        stmt = self._active_filter(select(Product), **filters)
        stmt = stmt.order_by(Product.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def count(self, session: Session, **filters) -> int:
        stmt = self._active_filter(select(func.count()).select_from(Product), **filters)
        return int(session.exec(stmt).one() or 0)

    def _available(self):
        return select(Product).where(
            Product.status == "active",
            Product.in_stock == True,  # noqa: E712
        )

    def list_featured(self, session: Session, limit: int = 12) -> list[Product]:
        stmt = self._available().where(Product.featured == True).limit(limit)  # noqa: E712
        return list(session.exec(stmt).all())

    def list_new(self, session: Session, limit: int = 12) -> list[Product]:
        stmt = (
            self._available()
            .where(Product.is_new == True)  # noqa: E712
            .order_by(Product.created_at.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_best_sellers(self, session: Session, limit: int = 12) -> list[Product]:
        stmt = self._available().order_by(Product.total_sold.desc()).limit(limit)
        return list(session.exec(stmt).all())

    def list_below_threshold(self, session: Session) -> list[Product]:
        """Active products at or below their low-stock threshold."""
        stmt = select(Product).where(
            Product.status == "active",
            Product.quantity <= Product.low_stock_threshold,
        )
        return list(session.exec(stmt).all())

    def list_categories(self, session: Session) -> list[str]:
        stmt = select(Product.category).distinct().order_by(Product.category)
        return list(session.exec(stmt).all())

    def count_all(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Product)
        return int(session.exec(stmt).one() or 0)

    # ----- Writes -----

    def save(self, session: Session, product: Product) -> Product:
        prepare_for_save(product)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def adjust_stock(
        self,
        session: Session,
        product_id: uuid.UUID,
        quantity: int,
        operation: str = "subtract",
        count_sale: bool = False,
    ) -> Product | None:
        """
        Atomically change stock on hand.

        - subtract: quantity = max(0, quantity - n)
        - add:      quantity = quantity + n
        - in_stock is set in the same statement
        - is_new is switched off once the product is past the new window
        - count_sale also bumps total_sold / week_sales / month_sales by n

        Returns the refreshed product, or None if the id does not exist.
        """
        if operation == "subtract":
            new_quantity = case(
                (Product.quantity > quantity, Product.quantity - quantity),
                else_=0,
            )
            in_stock = Product.quantity > quantity
        else:
            new_quantity = Product.quantity + quantity
            in_stock = Product.quantity + quantity > 0

        now = utcnow()
        values = {
            "quantity": new_quantity,
            "in_stock": in_stock,
            "is_new": case(
                (Product.created_at < now - NEW_PRODUCT_WINDOW, False),
                else_=Product.is_new,
            ),
            "updated_at": now,
        }
        if count_sale:
            values["total_sold"] = Product.total_sold + quantity
            values["week_sales"] = Product.week_sales + quantity
            values["month_sales"] = Product.month_sales + quantity

        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = session.exec(stmt)
        session.commit()

        if result.rowcount == 0:
            return None

        product = session.get(Product, product_id)
        session.refresh(product)
        return product
