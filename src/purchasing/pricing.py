"""Fixed-point money helpers.

Amounts are persisted as integer minor units (cents). Conversions go through
``Decimal`` with half-up rounding so that 8% of 110.00 is exactly 8.80.
"""

import os
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean.exceptions import ValidationError

_CENT = Decimal("0.01")
DEFAULT_TAX_RATE = Decimal("0.08")


def tax_rate() -> Decimal:
    """Return the configured tax rate (``PURCHASING_TAX_RATE``, default 8%)."""
    raw = os.getenv("PURCHASING_TAX_RATE")
    if raw is None:
        return DEFAULT_TAX_RATE
    return Decimal(raw)


def to_cents(amount) -> int:
    """Convert a major-unit amount (Decimal, str, int or float) to cents."""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError({"unit_price": [f"Invalid amount: {amount!r}"]}) from exc
    if value < 0:
        raise ValidationError({"unit_price": ["Amount cannot be negative"]})
    return int((value / _CENT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_decimal(cents: int) -> Decimal:
    """Convert cents back to a two-place Decimal."""
    return (Decimal(cents) * _CENT).quantize(_CENT)


def compute_totals(lines) -> tuple[int, int, int]:
    """Return ``(subtotal, tax, total)`` in cents for ``(unit_price_cents, quantity)`` pairs."""
    subtotal = sum(unit_price_cents * quantity for unit_price_cents, quantity in lines)
    tax = int((Decimal(subtotal) * tax_rate()).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return subtotal, tax, subtotal + tax
