"""
Follower count normalizer

Parses free-text audience sizes ("10k", "1.2M", "12,345") into integers.
Used by every follower-range comparison in the service.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

_SUFFIX_PATTERN = re.compile(r"^(\d*\.?\d+)\s*([km])$", re.IGNORECASE)
_NON_DIGITS = re.compile(r"\D")

_MULTIPLIERS = {
    "k": 1_000,
    "m": 1_000_000,
}


def normalize_followers(value: Optional[Union[str, int, float]]) -> int:
    """
    Normalize a follower count to a non-negative integer.

    Thousands separators are dropped, a trailing k/M suffix multiplies the
    numeric prefix, anything else keeps only its digits. Empty or
    unparseable input yields 0.
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return max(0, int(value))

    text = str(value).strip().replace(",", "")
    if not text:
        return 0

    match = _SUFFIX_PATTERN.match(text)
    if match:
        number, suffix = match.groups()
        try:
            scaled = Decimal(number) * _MULTIPLIERS[suffix.lower()]
        except InvalidOperation:
            return 0
        return int(scaled)

    digits = _NON_DIGITS.sub("", text)
    return int(digits) if digits else 0


__all__ = ["normalize_followers"]
