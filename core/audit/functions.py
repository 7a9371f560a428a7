"""
Retail Ledger Core Audit - Pure Audit Functions
================================================
Factory functions for audit transactions.
Pure: they return new frozen objects, never mutate.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from core.audit.models import (
    TRANSACTION_BILL_CREATED,
    TRANSACTION_BILL_DELETED,
    TRANSACTION_BILL_UPDATED,
    AuditTransaction,
)

_TITLES = {
    TRANSACTION_BILL_CREATED: ("Bill Created", "Bill {number} created"),
    TRANSACTION_BILL_UPDATED: ("Bill Updated", "Bill {number} updated"),
    TRANSACTION_BILL_DELETED: ("Bill Deleted", "Bill {number} deleted"),
}


def create_audit_transaction(
    *,
    event_id: uuid.UUID,
    tenant_id: uuid.UUID,
    bill_id: uuid.UUID,
    transaction_type: str,
    invoice_number: str,
    occurred_at: datetime,
    metadata: Optional[dict] = None,
    transaction_id: Optional[uuid.UUID] = None,
) -> AuditTransaction:
    """Create an immutable audit transaction with its standard title/message."""
    if transaction_type not in _TITLES:
        raise ValueError(f"Unknown transaction_type '{transaction_type}'.")
    title, message = _TITLES[transaction_type]
    return AuditTransaction(
        transaction_id=transaction_id or uuid.uuid4(),
        event_id=event_id,
        tenant_id=tenant_id,
        bill_id=bill_id,
        transaction_type=transaction_type,
        title=title,
        message=message.format(number=invoice_number),
        occurred_at=occurred_at,
        metadata=metadata or {},
    )
