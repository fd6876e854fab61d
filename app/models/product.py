# app/models/product.py
import uuid
from datetime import datetime

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from app.core.clock import utcnow


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    Groups (flattened into columns):
      - inventory: quantity, in_stock, low_stock_threshold, sku
      - seo: slug, meta_title, meta_description, keywords
      - ratings: rating_average, rating_count
      - sales: total_sold, week_sales, month_sales

    slug / sku / in_stock / is_new are derived on every save
    (see app.services.catalog_rules).
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the product",
    )

    description: str = Field(
        max_length=1000,
        description="Long description",
    )

    # Selofan | Rulon | Aksessuarlar
    category: str = Field(
        index=True,
        description="Catalog category",
    )

    size: str = Field(description="Human readable size, e.g. '20x30 sm'")

    price: float = Field(ge=0, description="Unit price (so'm)")

    original_price: float | None = Field(
        default=None,
        ge=0,
        description="Price before discount, if the product is on sale",
    )

    # Ordered; the first entry is the main image
    images: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    specifications: dict[str, str] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    # ----- inventory -----
    quantity: int = Field(default=0, ge=0)
    in_stock: bool = Field(default=True, index=True)
    low_stock_threshold: int = Field(default=10, ge=0)
    sku: str | None = Field(default=None, unique=True, index=True)

    # ----- seo -----
    slug: str | None = Field(default=None, unique=True, index=True)
    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    features: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    usage: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    # ----- ratings -----
    rating_average: float = Field(default=0, ge=0, le=5)
    rating_count: int = Field(default=0, ge=0)

    # ----- sales -----
    total_sold: int = Field(default=0, ge=0)
    week_sales: int = Field(default=0, ge=0)
    month_sales: int = Field(default=0, ge=0)

    # active | inactive | discontinued
    status: str = Field(default="active", index=True)
    featured: bool = Field(default=False, index=True)
    is_new: bool = Field(default=True)

    created_at: datetime = Field(
        default_factory=utcnow,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        description="Last update timestamp (UTC)",
    )
