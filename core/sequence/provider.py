"""
Retail Ledger Sequence - Counter Provider
==========================================
Protocol + InMemory implementation for the per (tenant, year)
invoice counter.

Rules:
- next_serial() is ONE atomic read-modify-write. Callers never read
  the counter and write it back themselves.
- A year with no counter row starts at 1.
- Gaps are tolerated (a later step may fail after a serial is issued).
  Duplicates are not.
- DB provider lives in core.ledger_store.repository.
"""

from __future__ import annotations

import threading
import uuid
from typing import Protocol


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

class SequenceProvider(Protocol):
    def next_serial(self, *, tenant_id: uuid.UUID, year: int) -> int:
        """Atomically advance and return the serial for (tenant, year)."""
        ...

    def current_serial(self, *, tenant_id: uuid.UUID, year: int) -> int:
        """Last issued serial for (tenant, year), 0 if none."""
        ...


# ---------------------------------------------------------------------------
# InMemory Provider (thread-safe)
# ---------------------------------------------------------------------------

class InMemorySequenceProvider:
    """
    Thread-safe in-memory counter store.
    One counter per (tenant_id, year) key. Used in tests and smoke wiring.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._serials: dict[tuple[uuid.UUID, int], int] = {}

    def next_serial(self, *, tenant_id: uuid.UUID, year: int) -> int:
        key = (tenant_id, int(year))
        with self._lock:
            serial = self._serials.get(key, 0) + 1
            self._serials[key] = serial
            return serial

    def current_serial(self, *, tenant_id: uuid.UUID, year: int) -> int:
        with self._lock:
            return self._serials.get((tenant_id, int(year)), 0)
