"""
Retail Ledger Command Layer
===========================
Rejections for requests refused before they reach an engine.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "ReasonCode",
    "RejectionReason",
]
