"""Shared in-memory ledger stack for tests."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from adapters.django_api.wiring import assemble_dependencies
from core.audit.store import InMemoryAuditLog
from core.http_api.auth import AuthPrincipal, InMemoryAuthProvider
from core.http_api.dependencies import LedgerApiDependencies
from core.sequence.provider import InMemorySequenceProvider
from core.time.clock import FixedClock
from engines.billing.commands import BillCreateRequest, BillLineRequest, CustomerCreateRequest
from engines.billing.models import TenantRecord
from engines.billing.repository import (
    InMemoryBillRepository,
    InMemoryCustomerDirectory,
    InMemoryTenantDirectory,
)
from engines.inventory.catalog import InMemoryCatalog, ProductSnapshot
from engines.notifications.repository import InMemoryNotificationStore

TENANT_ID = uuid.UUID("aaaaaaaa-0000-0000-0000-000000000001")
OTHER_TENANT_ID = uuid.UUID("bbbbbbbb-0000-0000-0000-000000000002")
API_KEY = "acme-key"
OTHER_API_KEY = "globex-key"
NOW = datetime(2025, 3, 12, 10, 0, tzinfo=timezone.utc)


@dataclass
class LedgerHarness:
    deps: LedgerApiDependencies
    catalog: InMemoryCatalog
    tenants: InMemoryTenantDirectory
    bills: InMemoryBillRepository
    customers: InMemoryCustomerDirectory
    sequence: InMemorySequenceProvider
    notifications: InMemoryNotificationStore
    audit_log: InMemoryAuditLog
    clock: FixedClock
    tenant_id: uuid.UUID = TENANT_ID

    @property
    def headers(self) -> dict:
        return {"X-API-KEY": API_KEY}

    @property
    def billing(self):
        return self.deps.billing_service

    def add_product(
        self,
        name: str = "Widget",
        price: str = "50.00",
        stock: int = 10,
        brand_name: str = "Acme Tools",
        tenant_id: uuid.UUID | None = None,
    ) -> ProductSnapshot:
        return self.catalog.register_product(
            tenant_id=tenant_id or self.tenant_id,
            name=name,
            price=Decimal(price),
            stock=stock,
            brand_name=brand_name,
        )

    def stock_of(self, product: ProductSnapshot) -> int:
        return self.catalog.get_product(
            tenant_id=product.tenant_id, product_id=product.product_id,
        ).stock

    def bill_request(
        self,
        lines,
        *,
        discount: str = "0",
        amount_paid: str = "0",
        payment_method: str = "Cash",
        customer_name: str = "Jane Doe",
        customer_id: uuid.UUID | None = None,
    ) -> BillCreateRequest:
        return BillCreateRequest(
            items=tuple(
                BillLineRequest(product_id=product.product_id, quantity=qty)
                for product, qty in lines
            ),
            payment_method=payment_method,
            customer_id=customer_id,
            customer=None if customer_id else CustomerCreateRequest(
                name=customer_name, phone="555-0100",
            ),
            discount=Decimal(discount),
            amount_paid=Decimal(amount_paid),
        )

    def create_bill(self, lines, **kwargs):
        return self.billing.create_bill(
            tenant_id=self.tenant_id, request=self.bill_request(lines, **kwargs),
        )


def build_harness(*, max_attempts: int = 3, timezone_name=None) -> LedgerHarness:
    catalog = InMemoryCatalog()
    tenants = InMemoryTenantDirectory([
        TenantRecord(tenant_id=TENANT_ID, name="Acme Store"),
        TenantRecord(tenant_id=OTHER_TENANT_ID, name="Globex Mart"),
    ])
    bills = InMemoryBillRepository()
    customers = InMemoryCustomerDirectory()
    sequence = InMemorySequenceProvider()
    notifications = InMemoryNotificationStore()
    audit_log = InMemoryAuditLog()
    clock = FixedClock(NOW)
    auth_provider = InMemoryAuthProvider({
        API_KEY: AuthPrincipal(actor_id="acme-cashier", tenant_id=TENANT_ID),
        OTHER_API_KEY: AuthPrincipal(actor_id="globex-cashier", tenant_id=OTHER_TENANT_ID),
    })
    deps = assemble_dependencies(
        bills=bills,
        customers=customers,
        tenants=tenants,
        catalog=catalog,
        sequence_provider=sequence,
        notification_store=notifications,
        audit_log=audit_log,
        auth_provider=auth_provider,
        clock=clock,
        timezone=timezone_name,
        max_attempts=max_attempts,
    )
    return LedgerHarness(
        deps=deps,
        catalog=catalog,
        tenants=tenants,
        bills=bills,
        customers=customers,
        sequence=sequence,
        notifications=notifications,
        audit_log=audit_log,
        clock=clock,
    )


@pytest.fixture
def ledger() -> LedgerHarness:
    return build_harness()
