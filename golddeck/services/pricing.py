"""pricing.py

Order-pricing calculator and the spot → per-gram conversion.

Everything here is a pure function: identical inputs always give the same
``OrderQuote``. Arithmetic is done in ``Decimal`` without intermediate
rounding; use :func:`round_cents` only when displaying a value.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .model import OrderQuote, Side

# Grams in one troy ounce
TROY_OUNCE_TO_GRAMS = Decimal("31.1034768")
# Fee charged on the subtotal of every order (0.75 %)
FEE_RATE = Decimal("0.0075")

_ZERO = Decimal("0")
_CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce user input into a finite, non-negative ``Decimal``.

    Strings are stripped first; floats go through ``str`` so ``0.1`` stays
    ``0.1``. Anything non-numeric, NaN, infinite or negative becomes zero.
    """
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return _ZERO
    elif isinstance(value, float):
        value = str(value)
    try:
        number = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return _ZERO
    if not number.is_finite() or number < 0:
        return _ZERO
    return number


def derive_unit_price(spot_price) -> Decimal:
    """Per-gram token price for a spot price quoted per troy ounce."""
    return to_decimal(spot_price) / TROY_OUNCE_TO_GRAMS


def quote_order(quantity, side: Side, unit_price) -> OrderQuote:
    """Price an order of *quantity* grams at *unit_price*.

    The fee is taken on the subtotal only. BUY orders pay it on top,
    SELL orders have it deducted from the proceeds.
    """
    side = str(side).upper()
    if side not in ("BUY", "SELL"):
        raise ValueError(f"Unknown order side: {side!r}")

    qty = to_decimal(quantity)
    price = to_decimal(unit_price)
    subtotal = qty * price
    fee = subtotal * FEE_RATE
    total = subtotal + fee if side == "BUY" else subtotal - fee

    return OrderQuote(
        side=side,
        quantity=qty,
        unit_price=price,
        subtotal=subtotal,
        fee=fee,
        total=total,
    )


def round_cents(amount) -> Decimal:
    """Round half-up to two decimals (display only). Keeps the sign."""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)
