"""
Retail Ledger Core Audit - Public API
======================================
Immutable audit transactions for the billing ledger.
"""

from core.audit.functions import create_audit_transaction
from core.audit.models import (
    TRANSACTION_BILL_CREATED,
    TRANSACTION_BILL_DELETED,
    TRANSACTION_BILL_UPDATED,
    VALID_TRANSACTION_TYPES,
    AuditTransaction,
)
from core.audit.store import AuditLog, InMemoryAuditLog

__all__ = [
    "AuditTransaction",
    "TRANSACTION_BILL_CREATED",
    "TRANSACTION_BILL_UPDATED",
    "TRANSACTION_BILL_DELETED",
    "VALID_TRANSACTION_TYPES",
    "create_audit_transaction",
    "AuditLog",
    "InMemoryAuditLog",
]
