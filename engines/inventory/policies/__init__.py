"""Retail Ledger Inventory Engine - stock policies."""

from __future__ import annotations

LOW_STOCK_THRESHOLD = 5


def is_low_stock(stock: int, threshold: int = LOW_STOCK_THRESHOLD) -> bool:
    """At or below threshold counts as low."""
    return stock <= threshold


def crossed_into_low_stock(
    previous_stock: int, current_stock: int, threshold: int = LOW_STOCK_THRESHOLD,
) -> bool:
    """Catalog edits alert only on the transition from above to at/below."""
    return previous_stock > threshold and current_stock <= threshold
