"""Amounts are stored and compared as integer cents."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from .errors import InvalidAmount

CENTS = Decimal(100)

AmountLike = Union[str, int, float, Decimal]


def parse_amount(raw: AmountLike | None) -> int:
    """
    Parse a positive amount given in major units ("150", "12.5", 50.0,
    Decimal("3.25")) into cents. Floats go through their shortest repr, so
    0.1 is ten cents and not the nearest binary fraction.

    Raises InvalidAmount for missing, non-numeric, non-finite, non-positive
    values and for anything finer than a cent.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmount(f"Invalid amount: {raw!r}")
    try:
        if isinstance(raw, str):
            raw_value = raw.strip()
        elif isinstance(raw, float):
            raw_value = str(raw)
        else:
            raw_value = raw
        value = Decimal(raw_value)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(f"Invalid amount: {raw!r}")
    if not value.is_finite() or value <= 0:
        raise InvalidAmount(f"Amount must be a positive number, got {raw!r}")
    cents = value * CENTS
    if cents != cents.to_integral_value():
        raise InvalidAmount(f"Amount has more than two decimal places: {raw!r}")
    return int(cents)


def format_cents(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}{whole}.{frac:02d}"
