# app/services/pricing.py
from typing import Iterable, NamedTuple, Protocol

from app.models.order import Order


class PricedLine(Protocol):
    price: float
    quantity: int


class PricingTotals(NamedTuple):
    subtotal: float
    total_price: float


def compute_pricing(
    items: Iterable[PricedLine],
    delivery_cost: float,
    discount: float = 0,
) -> PricingTotals:
    """
    subtotal    = sum(price * quantity)
    total_price = subtotal + delivery_cost - discount

    No clamping: bounding the discount is the caller's job.
    """
    subtotal = sum(item.price * item.quantity for item in items)
    return PricingTotals(subtotal, subtotal + delivery_cost - discount)


def apply_pricing(order: Order, items: Iterable[PricedLine]) -> Order:
    """Overwrite the order's derived pricing fields from its line items."""
    totals = compute_pricing(items, order.delivery_cost, order.discount)
    order.subtotal = totals.subtotal
    order.total_price = totals.total_price
    return order
