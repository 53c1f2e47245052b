"""IRD number validation."""

from __future__ import annotations

import re

PRIMARY_WEIGHTS = (3, 2, 7, 6, 5, 4, 3, 2)
SECONDARY_WEIGHTS = (7, 4, 3, 2, 5, 2, 7, 6)

MIN_IRD_NUMBER = 10_000_000
MAX_IRD_NUMBER = 150_000_000


def _check_digit(base: str, weights: tuple[int, ...]) -> int:
    remainder = sum(int(d) * w for d, w in zip(base, weights)) % 11
    return 0 if remainder == 0 else 11 - remainder


def validate_ird_number(value: str) -> bool:
    """Validate an IRD number (8 or 9 digits, separators ignored).

    Mod-11 check digit over the first eight digits of the zero-padded
    number. When the primary weighting yields 10 the secondary weighting is
    tried; a second 10 means the number is invalid.
    """
    digits = re.sub(r"\D", "", value or "")
    if not re.fullmatch(r"\d{8,9}", digits):
        return False

    number = int(digits)
    if not MIN_IRD_NUMBER < number < MAX_IRD_NUMBER:
        return False

    padded = digits.zfill(9)
    base, expected = padded[:8], int(padded[8])

    check = _check_digit(base, PRIMARY_WEIGHTS)
    if check == 10:
        check = _check_digit(base, SECONDARY_WEIGHTS)
        if check == 10:
            return False

    return check == expected


def format_ird_number(value: str) -> str:
    """Format as the usual ``NNN-NNN-NNN`` display form."""
    padded = re.sub(r"\D", "", value).zfill(9)
    return f"{padded[:3]}-{padded[3:6]}-{padded[6:]}"
