"""
Retail Ledger Billing Engine - Storage Protocols
=================================================
Protocol + InMemory implementations for bills, customers and tenants.
The Django ORM implementations live in core.ledger_store.repository.

Listing order is newest first (created_at desc, invoice number desc
as tie-breaker). Every lookup is tenant scoped.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import Iterable, Optional, Protocol

from engines.billing.errors import ConflictError
from engines.billing.models import Bill, Customer, Page, TenantRecord


# ══════════════════════════════════════════════════════════════
# PROTOCOLS
# ══════════════════════════════════════════════════════════════

class BillRepository(Protocol):
    def add(self, bill: Bill) -> Bill: ...

    def get(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> Optional[Bill]: ...

    def replace(self, bill: Bill) -> Bill: ...

    def remove(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> bool: ...

    def page_for_tenant(self, *, tenant_id: uuid.UUID, page: int, limit: int) -> Page: ...

    def in_window(
        self,
        *,
        tenant_id: uuid.UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Bill]: ...

    def count_for_tenant(self, *, tenant_id: uuid.UUID) -> int: ...


class CustomerDirectory(Protocol):
    def add(self, customer: Customer) -> Customer: ...

    def get(self, *, tenant_id: uuid.UUID, customer_id: uuid.UUID) -> Optional[Customer]: ...

    def get_many(
        self, *, tenant_id: uuid.UUID, customer_ids: Iterable[uuid.UUID],
    ) -> dict[uuid.UUID, Customer]: ...

    def list_for_tenant(self, *, tenant_id: uuid.UUID) -> list[Customer]: ...

    def remove(self, *, tenant_id: uuid.UUID, customer_id: uuid.UUID) -> bool: ...


class TenantDirectory(Protocol):
    def get(self, tenant_id: uuid.UUID) -> Optional[TenantRecord]: ...


# ══════════════════════════════════════════════════════════════
# IN-MEMORY IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

def _newest_first(bill: Bill):
    return (bill.created_at, bill.invoice_number)


class InMemoryBillRepository:
    def __init__(self):
        self._lock = threading.Lock()
        self._bills: dict[uuid.UUID, Bill] = {}

    def add(self, bill: Bill) -> Bill:
        with self._lock:
            for existing in self._bills.values():
                if (
                    existing.tenant_id == bill.tenant_id
                    and existing.invoice_number == bill.invoice_number
                ):
                    raise ConflictError(
                        f"Invoice number {bill.invoice_number} already exists for tenant."
                    )
            if bill.bill_id in self._bills:
                raise ConflictError(f"Bill {bill.bill_id} already exists.")
            self._bills[bill.bill_id] = bill.with_customer(None)
        return bill

    def get(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> Optional[Bill]:
        with self._lock:
            bill = self._bills.get(bill_id)
        if bill is None or bill.tenant_id != tenant_id:
            return None
        return bill

    def replace(self, bill: Bill) -> Bill:
        with self._lock:
            self._bills[bill.bill_id] = bill.with_customer(None)
        return bill

    def remove(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> bool:
        with self._lock:
            bill = self._bills.get(bill_id)
            if bill is None or bill.tenant_id != tenant_id:
                return False
            del self._bills[bill_id]
            return True

    def _for_tenant(self, tenant_id: uuid.UUID) -> list[Bill]:
        with self._lock:
            bills = [b for b in self._bills.values() if b.tenant_id == tenant_id]
        return sorted(bills, key=_newest_first, reverse=True)

    def page_for_tenant(self, *, tenant_id: uuid.UUID, page: int, limit: int) -> Page:
        bills = self._for_tenant(tenant_id)
        offset = (page - 1) * limit
        return Page(
            items=tuple(bills[offset:offset + limit]),
            total=len(bills),
            page=page,
            limit=limit,
        )

    def in_window(
        self,
        *,
        tenant_id: uuid.UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Bill]:
        return [
            bill for bill in self._for_tenant(tenant_id)
            if (start is None or bill.created_at >= start)
            and (end is None or bill.created_at <= end)
        ]

    def count_for_tenant(self, *, tenant_id: uuid.UUID) -> int:
        with self._lock:
            return sum(1 for b in self._bills.values() if b.tenant_id == tenant_id)


class InMemoryCustomerDirectory:
    def __init__(self):
        self._lock = threading.Lock()
        self._customers: dict[uuid.UUID, Customer] = {}

    def add(self, customer: Customer) -> Customer:
        with self._lock:
            if customer.customer_id in self._customers:
                raise ConflictError(f"Customer {customer.customer_id} already exists.")
            self._customers[customer.customer_id] = customer
        return customer

    def get(self, *, tenant_id: uuid.UUID, customer_id: uuid.UUID) -> Optional[Customer]:
        with self._lock:
            customer = self._customers.get(customer_id)
        if customer is None or customer.tenant_id != tenant_id:
            return None
        return customer

    def get_many(
        self, *, tenant_id: uuid.UUID, customer_ids: Iterable[uuid.UUID],
    ) -> dict[uuid.UUID, Customer]:
        wanted = set(customer_ids)
        with self._lock:
            return {
                cid: c for cid, c in self._customers.items()
                if cid in wanted and c.tenant_id == tenant_id
            }

    def list_for_tenant(self, *, tenant_id: uuid.UUID) -> list[Customer]:
        with self._lock:
            customers = [c for c in self._customers.values() if c.tenant_id == tenant_id]
        return sorted(customers, key=lambda c: (c.created_at, c.name), reverse=True)

    def remove(self, *, tenant_id: uuid.UUID, customer_id: uuid.UUID) -> bool:
        with self._lock:
            customer = self._customers.get(customer_id)
            if customer is None or customer.tenant_id != tenant_id:
                return False
            del self._customers[customer_id]
        return True


class InMemoryTenantDirectory:
    def __init__(self, tenants: Iterable[TenantRecord] = ()):
        self._lock = threading.Lock()
        self._tenants: dict[uuid.UUID, TenantRecord] = {t.tenant_id: t for t in tenants}

    def add(self, tenant: TenantRecord) -> TenantRecord:
        with self._lock:
            self._tenants[tenant.tenant_id] = tenant
        return tenant

    def get(self, tenant_id: uuid.UUID) -> Optional[TenantRecord]:
        with self._lock:
            return self._tenants.get(tenant_id)
