"""Shared utility helpers used across supplier clients and services."""

import re
from datetime import datetime, timezone


def safe_int(v):
    """Safely convert a value to int, returning None on failure."""
    if v is None:
        return None
    try:
        return int(v)
    except (ValueError, TypeError):
        return None


_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def parse_price(v) -> float | None:
    """Parse a supplier price that may be a number, a numeric string or a
    range like "3.20 -- 4.10" (lowest bound wins)."""
    if isinstance(v, (int, float)):
        return float(v)
    if not isinstance(v, str):
        return None
    m = _NUMBER_RE.search(v)
    return float(m.group()) if m else None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
