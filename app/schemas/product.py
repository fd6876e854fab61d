# app/schemas/product.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

ProductCategory = Literal["Selofan", "Rulon", "Aksessuarlar"]
ProductStatus = Literal["active", "inactive", "discontinued"]
StockStatus = Literal["in_stock", "low_stock", "out_of_stock"]
StockOperation = Literal["subtract", "add"]


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    - slug is optional: if omitted, generated from `name`.
    - sku is optional: if omitted, generated from `category`.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    description: str = Field(max_length=1000)
    category: ProductCategory
    size: str
    price: float = Field(ge=0)
    original_price: float | None = Field(default=None, ge=0)
    images: list[str] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict)
    quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    sku: str | None = None
    slug: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    usage: list[str] = Field(default_factory=list)
    status: ProductStatus = "active"
    featured: bool = False

    @field_validator("name", "description", "size")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("slug", "sku")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty if provided")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    category: ProductCategory | None = None
    size: str | None = None
    price: float | None = Field(default=None, ge=0)
    original_price: float | None = Field(default=None, ge=0)
    images: list[str] | None = None
    specifications: dict[str, str] | None = None
    low_stock_threshold: int | None = Field(default=None, ge=0)
    slug: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] | None = None
    features: list[str] | None = None
    usage: list[str] | None = None
    status: ProductStatus | None = None
    featured: bool | None = None

    @field_validator("name", "description", "size", "slug")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductRead(SQLModel):
    """
    Product representation for clients, including derived fields.
    """

    id: uuid.UUID
    name: str
    description: str
    category: str
    size: str
    price: float
    original_price: float | None
    images: list[str]
    specifications: dict[str, str]
    quantity: int
    in_stock: bool
    low_stock_threshold: int
    sku: str | None
    slug: str | None
    meta_title: str | None
    meta_description: str | None
    keywords: list[str]
    features: list[str]
    usage: list[str]
    rating_average: float
    rating_count: int
    total_sold: int
    week_sales: int
    month_sales: int
    status: str
    featured: bool
    is_new: bool
    created_at: datetime
    updated_at: datetime

    # derived
    discount_percentage: int
    stock_status: StockStatus
    main_image: str | None


class ProductListResponse(SQLModel):
    products: list[ProductRead]
    total_pages: int
    current_page: int
    total: int


class StockUpdate(SQLModel):
    """
    Admin payload to adjust stock on hand.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(gt=0)
    operation: StockOperation = "subtract"


class RatingCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    rating: float = Field(ge=0, le=5)


class LowStockAlertResult(SQLModel):
    checked: int
    alerted: int
