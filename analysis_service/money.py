from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Range of a NUMERIC(10, 2) money column
MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal(10) ** 8

# Leading numeric prefix, the way a lenient float parser reads "12.50 USD"
_NUMERIC_PREFIX = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a monetary value into a Decimal.

    Accepts Decimal, int, float and decimal strings. Floats go through str()
    so 0.1 becomes Decimal("0.1") rather than its binary expansion.
    Returns None when the value is missing or not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        value = str(value)
    s = str(value).strip().replace(",", "")
    if s == "":
        return None
    try:
        parsed = Decimal(s)
    except InvalidOperation:
        match = _NUMERIC_PREFIX.match(s)
        if match is None:
            return None
        parsed = Decimal(match.group(0))
    return parsed if parsed.is_finite() else None


def amount_or_zero(value: Any, context: str = "") -> Tuple[Decimal, bool]:
    """Return (amount, valid). Unparseable amounts contribute zero and are logged."""
    parsed = parse_amount(value)
    if parsed is None:
        logger.warning("Invalid amount %r%s; counting as zero", value, f" ({context})" if context else "")
        return ZERO, False
    return parsed, True


def is_storable_amount(amount: Optional[Decimal]) -> bool:
    """Positive, whole cents, and below 10**8 so the store never rounds or overflows it."""
    if amount is None or not amount.is_finite():
        return False
    return MIN_AMOUNT <= amount < MAX_AMOUNT and amount % MIN_AMOUNT == 0


def percent(part: Decimal, whole: Decimal) -> float:
    """part / whole * 100, unclamped; 0.0 when whole is zero."""
    if not whole:
        return 0.0
    return float(part / whole * HUNDRED)
