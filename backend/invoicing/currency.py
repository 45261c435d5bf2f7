# Overview: Dollar/cent conversions and invoice total normalization.

"""
Currency helpers

All persisted money is integer cents. Callers pass dollars (major units);
these helpers are the only place the two representations meet.

ROUNDING: half-up on the decimal representation of the input, so that
100.50 -> 10050 and 0.005 -> 1 regardless of binary float artifacts.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENTS_PER_DOLLAR = 100

# Totals below this are assumed to be dollars; at or above, already cents.
# NOTE: ambiguous for 100.00-9999.99 dollars supplied as cents. Kept for
# compatibility with existing data entry.
DOLLAR_THRESHOLD = 10000

_CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce int/float/Decimal/numeric string to Decimal (raises ValueError)."""
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a number: {value!r}")
    return result


def to_cents(dollars) -> int:
    """Convert dollars to integer cents, rounding half-up."""
    cents = to_decimal(dollars) * CENTS_PER_DOLLAR
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_dollars(cents) -> float:
    """Convert cents to dollars rounded to 2 places."""
    dollars = to_decimal(cents) / CENTS_PER_DOLLAR
    return float(dollars.quantize(_CENT, rounding=ROUND_HALF_UP))


def normalize_invoice_total(value) -> int:
    """
    Normalize a caller-supplied invoice total to cents.

    - value < DOLLAR_THRESHOLD: treated as dollars (100 -> 10000)
    - otherwise: assumed to already be cents and left unconverted; a
      fractional value there is rounded half-up to whole cents (10000.5 -> 10001)
    """
    amount = to_decimal(value)
    if amount < DOLLAR_THRESHOLD:
        return to_cents(amount)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_dollars(cents) -> str:
    """Render cents as a '$1,234.50' string."""
    return f"${to_dollars(cents):,.2f}"
