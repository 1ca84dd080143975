"""Parsing and formatting of monetary values at the API boundary.

Amounts arrive as text from form fields and JSON bodies. Everything is
turned into ``Decimal`` here before any arithmetic happens.
"""
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
# Beyond these, cent rounding would overflow the default 28-digit context
MAX_AMOUNT = Decimal("1e15")
MAX_QUANTITY = 10**9


def parse_amount(raw: Any) -> Decimal | None:
    """Return ``raw`` as a Decimal, or None when it is empty, not finite or out of range."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        value = Decimal(repr(raw))
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
    if not value.is_finite() or abs(value) >= MAX_AMOUNT:
        return None
    return value


def normalize_quantity(raw: Any) -> int:
    """Clamp an operator-entered quantity to a non-negative int.

    Parse failures, negatives and implausibly large counts become 0;
    fractional input is truncated.
    """
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw if 0 <= raw <= MAX_QUANTITY else 0
    value = parse_amount(raw)
    if value is None:
        return 0
    quantity = int(value.to_integral_value(rounding=ROUND_DOWN))
    return quantity if 0 <= quantity <= MAX_QUANTITY else 0


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    return f"{quantize(value):.2f}"


def to_cents(value: Decimal) -> int:
    return int(quantize(value) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(int(cents)) / 100).quantize(CENT)
