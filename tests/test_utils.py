"""
test_utils.py — Tests for the shared payload parsing helpers

Covers: safe_int coercion, parse_price on numbers, strings and price
ranges, and the timezone of utcnow().

Called by: pytest
Depends on: app/utils/__init__.py
"""

from datetime import timezone

import app.utils as utils
from app.utils import parse_price, safe_int, utcnow


def test_safe_int():
    assert safe_int("42") == 42
    assert safe_int(7.9) == 7
    assert safe_int(None) is None
    assert safe_int("n/a") is None
    assert safe_int([1]) is None


def test_parse_price_number_and_string():
    assert parse_price(3) == 3.0
    assert parse_price("19.99") == 19.99
    assert parse_price("") is None
    assert parse_price(None) is None


def test_parse_price_range_takes_lowest_bound():
    assert parse_price("3.20 -- 4.10") == 3.2


def test_utcnow_is_aware():
    assert utcnow().tzinfo is timezone.utc


def test_only_payload_helpers_exported():
    public = {name for name in vars(utils) if not name.startswith("_") and callable(getattr(utils, name))}
    assert {"safe_int", "parse_price", "utcnow"} <= public
    assert "safe_float" not in public
