"""
Retail Ledger Reporting Engine - Window Policies
=================================================
Resolves the start boundary of a sales report window in the tenant's
local time zone.

day    local midnight today
week   Monday 00:00 of the current week (Sunday belongs to the week
       that started six days earlier)
month  the 1st of the current month, 00:00
all    unbounded (None)
"""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Optional

from core.time.clock import to_local
from engines.billing.errors import ValidationError

WINDOW_DAY = "day"
WINDOW_WEEK = "week"
WINDOW_MONTH = "month"
WINDOW_ALL = "all"

REPORT_WINDOWS = (WINDOW_DAY, WINDOW_WEEK, WINDOW_MONTH, WINDOW_ALL)

TOP_PRODUCTS_LIMIT = 10


def validate_window(window) -> str:
    if window not in REPORT_WINDOWS:
        raise ValidationError(
            f"window must be one of {list(REPORT_WINDOWS)}, got '{window}'.",
            field="window",
        )
    return window


def resolve_window_start(window: str, now: datetime, tz: tzinfo) -> Optional[datetime]:
    validate_window(window)
    if window == WINDOW_ALL:
        return None

    local_now = to_local(now, tz)
    midnight = datetime(local_now.year, local_now.month, local_now.day, tzinfo=tz)
    if window == WINDOW_DAY:
        return midnight
    if window == WINDOW_WEEK:
        monday = local_now.date() - timedelta(days=local_now.weekday())
        return datetime(monday.year, monday.month, monday.day, tzinfo=tz)
    return datetime(local_now.year, local_now.month, 1, tzinfo=tz)
