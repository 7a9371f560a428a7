"""
Retail Ledger Core Audit - Immutable Audit Models
==================================================
Append-only records of bill lifecycle events ("transactions").
Frozen dataclasses: once created, never modified, and they outlive
the bill they describe.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime


TRANSACTION_BILL_CREATED = "BILL_CREATED"
TRANSACTION_BILL_UPDATED = "BILL_UPDATED"
TRANSACTION_BILL_DELETED = "BILL_DELETED"

VALID_TRANSACTION_TYPES = frozenset({
    TRANSACTION_BILL_CREATED,
    TRANSACTION_BILL_UPDATED,
    TRANSACTION_BILL_DELETED,
})


# ══════════════════════════════════════════════════════════════
# AUDIT TRANSACTION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AuditTransaction:
    """
    Immutable record of one ledger event.

    `metadata` is the typed event payload flattened with to_dict() at
    the time of the event, so later edits to the bill never leak in.
    """

    transaction_id: uuid.UUID
    event_id: uuid.UUID
    tenant_id: uuid.UUID
    bill_id: uuid.UUID
    transaction_type: str
    title: str
    message: str
    occurred_at: datetime
    metadata: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.transaction_type not in VALID_TRANSACTION_TYPES:
            raise ValueError(
                f"transaction_type must be one of {sorted(VALID_TRANSACTION_TYPES)}, "
                f"got '{self.transaction_type}'."
            )

    @property
    def action(self) -> str:
        return self.transaction_type

    def to_dict(self) -> dict:
        return {
            "id": str(self.transaction_id),
            "eventId": str(self.event_id),
            "billId": str(self.bill_id),
            "type": self.transaction_type,
            "title": self.title,
            "message": self.message,
            "action": self.action,
            "data": dict(self.metadata),
            "createdAt": self.occurred_at.isoformat(),
        }
