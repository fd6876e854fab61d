# app/services/catalog_rules.py
import math
from datetime import datetime, timedelta

from app.core.clock import as_utc, utcnow
from app.core.identifiers import generate_sku, slugify
from app.models.product import Product

NEW_PRODUCT_WINDOW = timedelta(days=30)


def prepare_for_save(product: Product, now: datetime | None = None) -> Product:
    """
    Derivations applied before every product save:
      - slug from name when unset
      - sku from category + creation timestamp when unset
      - in_stock recomputed from quantity
      - is_new switched off (for good) once the product is 30+ days old
    """
    now = now or utcnow()

    if not product.slug:
        product.slug = slugify(product.name)

    if not product.sku:
        product.sku = generate_sku(product.category, as_utc(product.created_at))

    product.in_stock = product.quantity > 0

    created_at = as_utc(product.created_at)
    if product.is_new and created_at and now - created_at > NEW_PRODUCT_WINDOW:
        product.is_new = False

    product.updated_at = now
    return product


def discount_percentage(product: Product) -> int:
    if product.original_price and product.original_price > product.price:
        pct = (product.original_price - product.price) / product.original_price * 100
        # half-up, not banker's rounding
        return math.floor(pct + 0.5)
    return 0


def stock_status(product: Product) -> str:
    if product.quantity == 0:
        return "out_of_stock"
    if product.quantity <= product.low_stock_threshold:
        return "low_stock"
    return "in_stock"


def main_image(product: Product) -> str | None:
    return product.images[0] if product.images else None


def running_average(average: float, count: int, new_rating: float) -> float:
    return (average * count + new_rating) / (count + 1)
