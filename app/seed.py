# app/seed.py
import logging

from sqlmodel import Session

from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate
from app.services.product_service import ProductService

logger = logging.getLogger(__name__)


def _bag(name, description, size, price, quantity, thickness, sku, slug, image_no):
    return ProductCreate(
        name=name,
        description=description,
        category="Selofan",
        size=size,
        price=price,
        quantity=quantity,
        images=[f"https://picsum.photos/400/300?random={image_no}"],
        specifications={
            "material": "Yuqori sifatli selofan",
            "thickness": thickness,
            "color": "Shaffof",
        },
        sku=sku,
        slug=slug,
    )


def _roll(name, description, size, price, quantity, thickness, sku, slug, image_no):
    return ProductCreate(
        name=name,
        description=description,
        category="Rulon",
        size=size,
        price=price,
        quantity=quantity,
        images=[f"https://picsum.photos/400/300?random={image_no}"],
        specifications={
            "material": "Polietilen",
            "length": "100 metr",
            "thickness": thickness,
        },
        sku=sku,
        slug=slug,
    )


SAMPLE_PRODUCTS: list[ProductCreate] = [
    _bag(
        "Selofan Paket Kichik",
        "Do'konlar uchun kichik o'lchamdagi selofan paket",
        "20x30 sm", 500, 1000, "25 mikron", "SEL001", "selofan-paket-kichik", 1,
    ),
    _bag(
        "Selofan Paket O'rta",
        "O'rta bizneslar uchun selofan paket",
        "30x40 sm", 800, 800, "30 mikron", "SEL002", "selofan-paket-orta", 2,
    ),
    _bag(
        "Selofan Paket Katta",
        "Yirik do'konlar uchun katta selofan paket",
        "40x50 sm", 1200, 500, "35 mikron", "SEL003", "selofan-paket-katta", 3,
    ),
    _roll(
        "Rulon Paket Kichik",
        "Kichik bizneslar uchun rulon paket",
        "30 sm kenglik", 1500, 200, "40 mikron", "RUL001", "rulon-paket-kichik", 4,
    ),
    _roll(
        "Rulon Paket O'rta",
        "O'rta bizneslar uchun rulon paket",
        "50 sm kenglik", 2500, 150, "45 mikron", "RUL002", "rulon-paket-orta", 5,
    ),
    _roll(
        "Rulon Paket Katta",
        "Yirik bizneslar uchun rulon paket",
        "70 sm kenglik", 3500, 100, "50 mikron", "RUL003", "rulon-paket-katta", 6,
    ),
]


def seed_sample_products(session: Session) -> int:
    """
    Insert the sample catalog if no product exists yet.

    Returns the number of products created.
    """
    repo = ProductRepository()
    if repo.count_all(session) > 0:
        logger.info("Catalog not empty, skipping sample products")
        return 0

    service = ProductService(repo)
    for payload in SAMPLE_PRODUCTS:
        service.create_product(session, payload)
    logger.info("Seeded %d sample products", len(SAMPLE_PRODUCTS))
    return len(SAMPLE_PRODUCTS)
