"""
Retail Ledger Core Audit - Audit Log
=====================================
Protocol + InMemory implementation. Append and read only:
there is no update or delete.
"""

from __future__ import annotations

import threading
import uuid
from typing import Protocol

from core.audit.models import AuditTransaction


class AuditLog(Protocol):
    def append(self, transaction: AuditTransaction) -> AuditTransaction: ...

    def list_for_tenant(self, *, tenant_id: uuid.UUID) -> list[AuditTransaction]: ...

    def list_for_bill(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> list[AuditTransaction]: ...


class InMemoryAuditLog:
    def __init__(self):
        self._lock = threading.Lock()
        self._entries: list[AuditTransaction] = []

    def append(self, transaction: AuditTransaction) -> AuditTransaction:
        with self._lock:
            self._entries.append(transaction)
        return transaction

    def _select(self, predicate) -> list[AuditTransaction]:
        with self._lock:
            indexed = [(i, t) for i, t in enumerate(self._entries) if predicate(t)]
        indexed.sort(key=lambda pair: (pair[1].occurred_at, pair[0]), reverse=True)
        return [t for _, t in indexed]

    def list_for_tenant(self, *, tenant_id: uuid.UUID) -> list[AuditTransaction]:
        """Newest first."""
        return self._select(lambda t: t.tenant_id == tenant_id)

    def list_for_bill(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> list[AuditTransaction]:
        return self._select(lambda t: t.tenant_id == tenant_id and t.bill_id == bill_id)
