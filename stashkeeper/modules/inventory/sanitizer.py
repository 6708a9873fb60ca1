"""
Canonical persisted shape of accepted items.

Only run on items that already passed validation. The output is minimal:
defaults are encoded by absence (no ``r`` means unrotated, no ``c`` means
full condition, no ``contents`` means empty), numbers are truncated or
rounded, and unknown fields are gone. Sanitizing a sanitized item changes
nothing.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List

from stashkeeper.core.models import MAX_CONDITION, InventoryItem


def _round_condition(value: float) -> float:
    # Half-up to one decimal, matching what clients display
    return float(Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def sanitize_item(item: InventoryItem) -> Dict[str, Any]:
    """
    Reduce an accepted item tree to its persisted form.

    Args:
        item: Validated item (an InventoryItem or its dict form)

    Returns:
        Dict with wire keys t, n and any of x, y, slot, r, c, contents
    """
    if not isinstance(item, InventoryItem):
        item = InventoryItem.from_dict(item)

    sanitized: Dict[str, Any] = {
        't': item.t,
        'n': math.floor(item.n),
    }

    if item.x is not None:
        sanitized['x'] = math.floor(item.x)
    if item.y is not None:
        sanitized['y'] = math.floor(item.y)
    if item.slot:
        sanitized['slot'] = item.slot
    if item.r is True:
        sanitized['r'] = True
    if item.c is not None:
        # 99.95 rounds to 100, which is stored as absent like any full condition
        condition = _round_condition(item.c)
        if condition < MAX_CONDITION:
            sanitized['c'] = condition
    if item.contents:
        sanitized['contents'] = [sanitize_item(child) for child in item.contents]

    return sanitized


def sanitize_items(items: List[InventoryItem]) -> List[Dict[str, Any]]:
    """Sanitize a whole section, preserving submission order."""
    return [sanitize_item(item) for item in items]


__all__ = ['sanitize_item', 'sanitize_items']
