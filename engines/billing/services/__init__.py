"""
Retail Ledger Billing Engine - Application Service
===================================================
LedgerStore     bill persistence with customers populated, tenant scoped
BillingService  Bill Builder: create / amend / delete bills, customers

Write path for every bill mutation:
1. validate request (DTO __post_init__)
2. inside the unit of work: price, number, create customer, persist, adjust stock
3. after the unit of work exits: publish side effects to the outbox

Side effects never fail the write. Construction errors are logged and
dropped, delivery errors are retried and dead-lettered by the outbox.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import nullcontext
from typing import Callable, ContextManager, Iterable

from core.events.envelope import LedgerEvent
from core.sequence.engine import InvoiceNumberGenerator
from core.time.clock import Clock
from engines.billing.commands import (
    BillCreateRequest,
    BillUpdateRequest,
    CustomerCreateRequest,
)
from engines.billing.errors import NotFoundError, ValidationError
from engines.billing.events import (
    build_bill_created_payload,
    build_bill_deleted_payload,
    build_bill_updated_payload,
)
from engines.billing.models import Bill, Customer, LineItem, Page
from engines.billing.policies import (
    clamp_limit,
    clamp_page,
    compute_subtotal,
    compute_total,
    derive_status,
    to_money,
)
from engines.billing.repository import BillRepository, CustomerDirectory, TenantDirectory
from engines.inventory.catalog import CatalogReader
from engines.inventory.services import InventoryReconciler

logger = logging.getLogger("ledger.billing")


# ══════════════════════════════════════════════════════════════
# LEDGER STORE
# ══════════════════════════════════════════════════════════════

class LedgerStore:
    """Tenant-scoped bill persistence. Reads come back with the customer attached."""

    def __init__(
        self,
        bills: BillRepository,
        customers: CustomerDirectory,
        reconciler: InventoryReconciler,
    ):
        self._bills = bills
        self._customers = customers
        self._reconciler = reconciler

    def _populate(self, tenant_id: uuid.UUID, bills: Iterable[Bill]) -> list[Bill]:
        bills = list(bills)
        customers = self._customers.get_many(
            tenant_id=tenant_id, customer_ids={b.customer_id for b in bills},
        )
        return [b.with_customer(customers.get(b.customer_id)) for b in bills]

    def save(self, bill: Bill) -> Bill:
        return self._bills.add(bill)

    def update(self, bill: Bill) -> Bill:
        return self._bills.replace(bill)

    def discard(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> bool:
        """Remove a bill without touching stock."""
        return self._bills.remove(tenant_id=tenant_id, bill_id=bill_id)

    def get(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> Bill:
        bill = self._bills.get(tenant_id=tenant_id, bill_id=bill_id)
        if bill is None:
            raise NotFoundError("Bill", bill_id, message="Bill not found")
        return self._populate(tenant_id, [bill])[0]

    def list_by_tenant(self, *, tenant_id: uuid.UUID, page: int, limit: int) -> Page:
        result = self._bills.page_for_tenant(tenant_id=tenant_id, page=page, limit=limit)
        return Page(
            items=tuple(self._populate(tenant_id, result.items)),
            total=result.total,
            page=result.page,
            limit=result.limit,
        )

    def delete_restoring_stock(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> Bill:
        bill = self.get(tenant_id=tenant_id, bill_id=bill_id)
        self._reconciler.restore_sale(tenant_id=tenant_id, items=bill.items)
        self._bills.remove(tenant_id=tenant_id, bill_id=bill_id)
        return bill

    def bills_in_window(self, *, tenant_id: uuid.UUID, start=None, end=None) -> list[Bill]:
        return self._bills.in_window(tenant_id=tenant_id, start=start, end=end)

    def count(self, *, tenant_id: uuid.UUID) -> int:
        return self._bills.count_for_tenant(tenant_id=tenant_id)


# ══════════════════════════════════════════════════════════════
# BILLING SERVICE (Bill Builder)
# ══════════════════════════════════════════════════════════════

class BillingService:
    def __init__(
        self,
        *,
        ledger_store: LedgerStore,
        customers: CustomerDirectory,
        tenants: TenantDirectory,
        catalog: CatalogReader,
        reconciler: InventoryReconciler,
        sequence: InvoiceNumberGenerator,
        outbox,
        clock: Clock,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
        unit_of_work: Callable[[], ContextManager] = nullcontext,
    ):
        self._ledger = ledger_store
        self._customers = customers
        self._tenants = tenants
        self._catalog = catalog
        self._reconciler = reconciler
        self._sequence = sequence
        self._outbox = outbox
        self._clock = clock
        self._id_factory = id_factory
        self._unit_of_work = unit_of_work

    # ── side effects ─────────────────────────────────────────

    def _publish_side_effects(self, tenant_id: uuid.UUID, build_payloads: Callable[[], list]) -> None:
        try:
            occurred_at = self._clock.now_utc()
            for payload in build_payloads():
                self._outbox.publish(
                    LedgerEvent.for_payload(payload, tenant_id=tenant_id, occurred_at=occurred_at)
                )
        except Exception as exc:
            logger.error(f"Side effects dropped for tenant {tenant_id}: {exc}", exc_info=True)
        self._outbox.drain()

    # ── customers ────────────────────────────────────────────

    def create_customer(self, *, tenant_id: uuid.UUID, request: CustomerCreateRequest) -> Customer:
        customer = self._customers.add(Customer(
            customer_id=self._id_factory(),
            tenant_id=tenant_id,
            name=request.name,
            phone=request.phone,
            address=request.address,
            created_at=self._clock.now_utc(),
        ))
        logger.info(f"Customer created: {customer.customer_id} for tenant {tenant_id}")
        return customer

    def list_customers(self, *, tenant_id: uuid.UUID) -> list[Customer]:
        return self._customers.list_for_tenant(tenant_id=tenant_id)

    def _existing_customer(self, tenant_id: uuid.UUID, request: BillCreateRequest) -> Customer | None:
        """The referenced customer, or None when the bill carries inline customer info."""
        if request.customer_id is None:
            return None
        customer = self._customers.get(tenant_id=tenant_id, customer_id=request.customer_id)
        if customer is None:
            raise NotFoundError("Customer", request.customer_id)
        return customer

    # ── bills ────────────────────────────────────────────────

    def create_bill(self, *, tenant_id: uuid.UUID, request: BillCreateRequest) -> Bill:
        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant", tenant_id)

        with self._unit_of_work():
            product_ids = [line.product_id for line in request.items]
            products = self._catalog.get_products(tenant_id=tenant_id, product_ids=product_ids)
            for product_id in product_ids:
                if product_id not in products:
                    raise NotFoundError(
                        "Product", product_id, message=f"Product not found: {product_id}",
                    )
            existing_customer = self._existing_customer(tenant_id, request)

            items = tuple(
                LineItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=products[line.product_id].price,
                    product_name=products[line.product_id].name,
                )
                for line in request.items
            )
            subtotal = compute_subtotal(items)
            discount = to_money(request.discount)
            total = compute_total(subtotal, discount)
            amount_paid = to_money(request.amount_paid)

            now = self._clock.now_utc()
            invoice_number = self._sequence.next_invoice_number(
                tenant_id=tenant_id, tenant_name=tenant.name, now=now,
            )

            # Inline customers are written only once numbering has succeeded.
            customer_created = existing_customer is None
            customer = (
                self.create_customer(tenant_id=tenant_id, request=request.customer)
                if customer_created
                else existing_customer
            )
            bill = Bill(
                bill_id=self._id_factory(),
                tenant_id=tenant_id,
                invoice_number=invoice_number,
                customer_id=customer.customer_id,
                items=items,
                subtotal=subtotal,
                discount=discount,
                total=total,
                payment_method=request.payment_method,
                amount_paid=amount_paid,
                status=derive_status(amount_paid, total),
                created_at=now,
                updated_at=now,
            )
            saved = False
            try:
                self._ledger.save(bill)
                saved = True
                alerts = self._reconciler.apply_sale(
                    tenant_id=tenant_id, items=items, products=products,
                )
            except Exception:
                logger.error(
                    f"Bill write failed for {invoice_number}; rolling back bill and customer",
                    exc_info=True,
                )
                if saved:
                    self._ledger.discard(tenant_id=tenant_id, bill_id=bill.bill_id)
                if customer_created:
                    self._customers.remove(tenant_id=tenant_id, customer_id=customer.customer_id)
                raise

        logger.info(f"Bill created: {invoice_number} total={total} status={bill.status}")

        descriptions = {pid: p.description for pid, p in products.items()}
        self._publish_side_effects(tenant_id, lambda: [
            build_bill_created_payload(bill, customer, descriptions),
            *alerts,
        ])
        return bill.with_customer(customer)

    def get_bill(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> Bill:
        return self._ledger.get(tenant_id=tenant_id, bill_id=bill_id)

    def list_bills(self, *, tenant_id: uuid.UUID, page=None, limit=None) -> Page:
        return self._ledger.list_by_tenant(
            tenant_id=tenant_id, page=clamp_page(page), limit=clamp_limit(limit),
        )

    def update_bill(
        self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID, request: BillUpdateRequest,
    ) -> Bill:
        if request.is_empty:
            raise ValidationError("No updatable fields supplied.")

        with self._unit_of_work():
            existing = self._ledger.get(tenant_id=tenant_id, bill_id=bill_id)
            amount_paid = (
                to_money(request.amount_paid)
                if request.amount_paid is not None
                else existing.amount_paid
            )
            updated = existing.with_payment(
                amount_paid=amount_paid,
                payment_method=request.payment_method or existing.payment_method,
                status=derive_status(amount_paid, existing.total),
                updated_at=self._clock.now_utc(),
            )
            self._ledger.update(updated)

        if request.status is not None and request.status != updated.status:
            logger.debug(
                f"Ignored caller status {request.status} for {updated.invoice_number}; "
                f"derived {updated.status}"
            )
        logger.info(f"Bill updated: {updated.invoice_number} status={updated.status}")

        self._publish_side_effects(tenant_id, lambda: [
            build_bill_updated_payload(updated, updated.customer),
        ])
        return updated

    def delete_bill(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> Bill:
        with self._unit_of_work():
            bill = self._ledger.delete_restoring_stock(tenant_id=tenant_id, bill_id=bill_id)

        logger.info(f"Bill deleted: {bill.invoice_number} (stock restored)")

        deleted_at = self._clock.now_utc()
        self._publish_side_effects(tenant_id, lambda: [
            build_bill_deleted_payload(bill, bill.customer, deleted_at),
        ])
        return bill
