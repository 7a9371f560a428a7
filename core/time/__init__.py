"""
Retail Ledger Core Time - Public API
=====================================
Explicit clock protocol and local-time helpers.
Rule: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    resolve_timezone,
    to_local,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "resolve_timezone",
    "to_local",
]
