# app/schemas/common.py
import re

# +998 followed by 9 digits, e.g. +998901234567
PHONE_PATTERN = re.compile(r"^\+998[0-9]{9}$")

EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(value))


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def strip_or_none(v: str | None) -> str | None:
    """Trim whitespace; empty strings become None."""
    if v is None:
        return v
    v = v.strip()
    return v or None
