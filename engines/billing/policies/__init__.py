"""Retail Ledger Billing Engine - pricing, status and paging policies."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

from engines.billing.errors import ValidationError
from engines.billing.models import (
    BILL_STATUS_PAID,
    BILL_STATUS_PENDING,
    CENT,
    ZERO,
    LineItem,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# ══════════════════════════════════════════════════════════════
# MONEY
# ══════════════════════════════════════════════════════════════

def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_money(value, *, field: str, default: Optional[Decimal] = None) -> Decimal:
    """
    Accept int, float, Decimal or numeric string. Reject bools,
    non-finite values and negatives. None falls back to `default`.
    """
    if value is None:
        if default is None:
            raise ValidationError(f"{field} is required.", field=field)
        return to_money(default)
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number.", field=field)
    if isinstance(value, (int, float, Decimal)):
        candidate = value
    elif isinstance(value, str) and value.strip():
        candidate = value.strip()
    else:
        raise ValidationError(f"{field} must be a number.", field=field)
    try:
        amount = Decimal(str(candidate))
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number.", field=field)
    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite.", field=field)
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0.", field=field)
    return to_money(amount)


# ══════════════════════════════════════════════════════════════
# TOTALS & STATUS
# ══════════════════════════════════════════════════════════════

def compute_subtotal(items: Iterable[LineItem]) -> Decimal:
    return to_money(sum((item.price * item.quantity for item in items), ZERO))


def compute_total(subtotal: Decimal, discount: Decimal) -> Decimal:
    return to_money(max(ZERO, subtotal - discount))


def derive_status(amount_paid: Decimal, total: Decimal) -> str:
    return BILL_STATUS_PAID if amount_paid >= total else BILL_STATUS_PENDING


def remaining_amount(total: Decimal, amount_paid: Decimal) -> Decimal:
    return to_money(max(ZERO, total - amount_paid))


# ══════════════════════════════════════════════════════════════
# PAGINATION
# ══════════════════════════════════════════════════════════════

def _leading_int(raw) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return None
    return int(match.group(1))


def clamp_page(raw) -> int:
    """Leading integer of `raw`; missing, unparsable or 0 -> 1; never < 1."""
    parsed = _leading_int(raw) or DEFAULT_PAGE
    return max(1, parsed)


def clamp_limit(raw) -> int:
    """Leading integer of `raw`; missing, unparsable or 0 -> 10; clamped to [1, 100]."""
    parsed = _leading_int(raw) or DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, parsed))
