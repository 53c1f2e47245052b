"""Decimal money helpers shared by the calculators."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from nz_payroll.calculators.errors import InvalidInputError

Number = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Number, field: str = "amount") -> Decimal:
    """Convert a caller-supplied number to Decimal.

    Floats go through ``str`` so 0.1 stays 0.1 rather than its binary
    expansion.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise InvalidInputError(field, value, "must be a number")
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise InvalidInputError(field, value, "must be a number") from None
    else:
        raise InvalidInputError(field, value, "must be a number")

    if not result.is_finite():
        raise InvalidInputError(field, value, "must be finite")
    return result


def non_negative(value: Number, field: str) -> Decimal:
    """Convert and reject negatives."""
    result = to_decimal(value, field)
    if result < 0:
        raise InvalidInputError(field, value, "must not be negative")
    return result


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
