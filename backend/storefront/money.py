"""
Money helpers.

All amounts are stored as integer fils (1/100 AED) and only converted to
decimal strings at the API boundary, e.g. 4500 <-> "45.00".
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

CURRENCY = "AED"

_CENT = Decimal("0.01")


def to_cents(value: Any) -> int:
    """
    Parse a decimal amount ("45.00", 45, 45.5) into integer cents.

    Rounds half-up to the nearest cent. Raises ValueError on garbage,
    booleans, NaN and infinities.
    """
    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError("amount must be a number")
    if not amount.is_finite():
        raise ValueError("amount must be a finite number")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(cents: Optional[int]) -> Optional[str]:
    if cents is None:
        return None
    return str((Decimal(cents) / 100).quantize(_CENT))


def percent_of(cents: int, percent: int) -> int:
    # nearest-cent rounding (half-up)
    return (cents * percent + 50) // 100
