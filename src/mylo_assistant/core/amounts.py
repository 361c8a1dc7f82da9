"""Best-effort parsing of spreadsheet amount cells.

Ledger cells are typed by hand, so a payout can arrive as ``120``,
``"$1,234.50"``, ``"50 USDC"`` or a lookup list like ``["7"]``. The parser
never raises: anything it cannot make sense of counts as zero, so a single
malformed row never aborts an aggregation.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")

# Everything except digits, minus sign and decimal point is noise
_NOISE = re.compile(r"[^0-9.\-]")
# Longest leading number in the cleaned text ("1.2.3" -> "1.2", "5-3" -> "5")
_LEADING_NUMBER = re.compile(r"^-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def parse_amount(value: Any) -> Decimal:
    """Convert an arbitrary field value into a decimal amount.

    Args:
        value: A number, string, list (first element is used) or None.

    Returns:
        The parsed amount, ``Decimal(0)`` when nothing usable is found.

    Example:
        >>> parse_amount("$1,234.50")
        Decimal('1234.50')
        >>> parse_amount(["7", "ignored"])
        Decimal('7')
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO

    if isinstance(value, int):
        return Decimal(value)

    if isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1
        parsed = Decimal(str(value))
        return parsed if parsed.is_finite() else ZERO

    if isinstance(value, str):
        return _parse_text(value)

    if isinstance(value, (list, tuple)):
        if not value:
            return ZERO
        return parse_amount(value[0])

    return ZERO


def _parse_text(text: str) -> Decimal:
    cleaned = _NOISE.sub("", text)
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return ZERO
    try:
        return Decimal(match.group())
    except InvalidOperation:
        return ZERO
