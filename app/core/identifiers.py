# app/core/identifiers.py
"""
Generators for human-facing identifiers: slugs, SKUs and order numbers.
"""
import random
import re
import time
from datetime import datetime

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(raw: str) -> str:
    """
    URL-friendly slug:
      - lowercase
      - any run of non-alphanumeric characters -> a single '-'
      - strip leading/trailing '-'

    Applying it to an existing slug returns the slug unchanged.
    """
    value = _NON_ALNUM.sub("-", raw.lower())
    return value.strip("-")


def epoch_millis(moment: datetime | None = None) -> int:
    if moment is None:
        return time.time_ns() // 1_000_000
    return int(moment.timestamp() * 1000)


def generate_sku(category: str, created_at: datetime | None = None) -> str:
    """
    Stock-keeping code: first three letters of the category (uppercased)
    plus the last six digits of the creation timestamp in epoch-ms.

    Example: "Selofan" -> "SEL-482913"
    """
    prefix = category[:3].upper()
    return f"{prefix}-{str(epoch_millis(created_at))[-6:]}"


def generate_order_number(
    prefix: str,
    created_at: datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """
    Human-readable order number:
        <prefix><last 6 digits of epoch-ms><3-digit zero-padded random>

    Example: "PKT482913057"
    """
    rng = rng or random
    suffix = rng.randint(0, 999)
    return f"{prefix}{str(epoch_millis(created_at))[-6:]}{suffix:03d}"
