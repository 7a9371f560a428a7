"""Django ORM storage: repositories, counters, atomic stock, full billing path."""

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from django.db import connection

from conftest import API_KEY, NOW, OTHER_TENANT_ID, TENANT_ID
from adapters.django_api.wiring import assemble_dependencies
from core.audit import TRANSACTION_BILL_CREATED, TRANSACTION_BILL_DELETED, create_audit_transaction
from core.http_api.auth import AuthPrincipal, InMemoryAuthProvider
from core.ledger_store import models as db
from core.ledger_store.repository import (
    DbAuditLog,
    DbBillRepository,
    DbCatalog,
    DbCustomerDirectory,
    DbNotificationStore,
    DbSequenceProvider,
    DbTenantDirectory,
    unit_of_work,
)
from core.time.clock import FixedClock
from engines.billing.commands import (
    BillCreateRequest,
    BillLineRequest,
    BillUpdateRequest,
    CustomerCreateRequest,
)
from engines.billing.errors import ConflictError, NotFoundError
from engines.billing.models import Bill, Customer, LineItem, TenantRecord
from engines.inventory.catalog import ProductSnapshot
from engines.notifications.models import Notification

pytestmark = pytest.mark.django_db(transaction=True)


def _tenants():
    tenants = DbTenantDirectory()
    tenants.add(TenantRecord(tenant_id=TENANT_ID, name="Acme Store"))
    tenants.add(TenantRecord(tenant_id=OTHER_TENANT_ID, name="Globex Mart"))
    return tenants


def _product(catalog, *, name="Widget", price="50.00", stock=10, tenant_id=TENANT_ID, brand_name="Acme Tools"):
    return catalog.add_product(ProductSnapshot(
        product_id=uuid.uuid4(),
        tenant_id=tenant_id,
        name=name,
        price=Decimal(price),
        stock=stock,
        brand_name=brand_name,
    ))


def _customer(customers, tenant_id=TENANT_ID, name="Jane Doe", created_at=NOW):
    return customers.add(Customer(
        customer_id=uuid.uuid4(), tenant_id=tenant_id, name=name, phone="555", created_at=created_at,
    ))


def _bill(customer, product, *, invoice_number, created_at=NOW, quantity=2):
    item = LineItem(product_id=product.product_id, quantity=quantity, price=product.price, product_name=product.name)
    total = item.line_total
    return Bill(
        bill_id=uuid.uuid4(),
        tenant_id=customer.tenant_id,
        invoice_number=invoice_number,
        customer_id=customer.customer_id,
        items=(item,),
        subtotal=total,
        discount=Decimal("0.00"),
        total=total,
        payment_method="Cash",
        amount_paid=Decimal("0.00"),
        status="Pending",
        created_at=created_at,
        updated_at=created_at,
    )


class TestDbTenantsAndCustomers:
    def test_tenant_upsert(self):
        tenants = _tenants()
        tenants.add(TenantRecord(tenant_id=TENANT_ID, name="Acme Superstore"))
        assert tenants.get(TENANT_ID).name == "Acme Superstore"
        assert tenants.get(uuid.uuid4()) is None

    def test_customers_are_tenant_scoped(self):
        _tenants()
        customers = DbCustomerDirectory()
        mine = _customer(customers)
        _customer(customers, tenant_id=OTHER_TENANT_ID, name="Other")

        assert customers.get(tenant_id=TENANT_ID, customer_id=mine.customer_id) == mine
        assert customers.get(tenant_id=OTHER_TENANT_ID, customer_id=mine.customer_id) is None
        assert [c.name for c in customers.list_for_tenant(tenant_id=TENANT_ID)] == ["Jane Doe"]

    def test_duplicate_customer_conflicts(self):
        _tenants()
        customers = DbCustomerDirectory()
        mine = _customer(customers)
        with pytest.raises(ConflictError):
            customers.add(mine)


class TestDbBillRepository:
    def test_add_get_and_line_order(self):
        _tenants()
        catalog, customers, bills = DbCatalog(), DbCustomerDirectory(), DbBillRepository()
        widget = _product(catalog)
        gadget = _product(catalog, name="Gadget", price="3.50")
        customer = _customer(customers)
        bill = _bill(customer, widget, invoice_number="acme-store-2025-0001")
        bill = replace(bill, items=bill.items + (
            LineItem(product_id=gadget.product_id, quantity=1, price=gadget.price, product_name="Gadget"),
        ))
        bills.add(bill)

        stored = bills.get(tenant_id=TENANT_ID, bill_id=bill.bill_id)
        assert stored == bill
        assert [i.product_name for i in stored.items] == ["Widget", "Gadget"]
        assert bills.get(tenant_id=OTHER_TENANT_ID, bill_id=bill.bill_id) is None

    def test_duplicate_invoice_number_conflicts(self):
        _tenants()
        catalog, customers, bills = DbCatalog(), DbCustomerDirectory(), DbBillRepository()
        widget = _product(catalog)
        customer = _customer(customers)
        bills.add(_bill(customer, widget, invoice_number="acme-store-2025-0001"))
        with pytest.raises(ConflictError):
            bills.add(_bill(customer, widget, invoice_number="acme-store-2025-0001"))
        assert bills.count_for_tenant(tenant_id=TENANT_ID) == 1

    def test_page_newest_first_and_window(self):
        _tenants()
        catalog, customers, bills = DbCatalog(), DbCustomerDirectory(), DbBillRepository()
        widget = _product(catalog)
        customer = _customer(customers)
        for n in range(1, 4):
            bills.add(_bill(
                customer, widget,
                invoice_number=f"acme-store-2025-000{n}",
                created_at=NOW + timedelta(hours=n),
            ))

        page = bills.page_for_tenant(tenant_id=TENANT_ID, page=1, limit=2)
        assert page.total == 3
        assert [b.invoice_number for b in page.items] == ["acme-store-2025-0003", "acme-store-2025-0002"]

        window = bills.in_window(
            tenant_id=TENANT_ID, start=NOW + timedelta(hours=2), end=NOW + timedelta(hours=2),
        )
        assert [b.invoice_number for b in window] == ["acme-store-2025-0002"]

    def test_replace_only_touches_payment_fields(self):
        _tenants()
        catalog, customers, bills = DbCatalog(), DbCustomerDirectory(), DbBillRepository()
        widget = _product(catalog)
        customer = _customer(customers)
        bill = bills.add(_bill(customer, widget, invoice_number="acme-store-2025-0001"))

        later = NOW + timedelta(minutes=5)
        bills.replace(bill.with_payment(
            amount_paid=bill.total, payment_method="Online", status="Paid", updated_at=later,
        ))
        stored = bills.get(tenant_id=TENANT_ID, bill_id=bill.bill_id)
        assert (stored.status, stored.payment_method, stored.updated_at) == ("Paid", "Online", later)
        assert stored.items == bill.items

    def test_replace_and_remove_missing(self):
        _tenants()
        catalog, customers, bills = DbCatalog(), DbCustomerDirectory(), DbBillRepository()
        bill = _bill(_customer(customers), _product(catalog), invoice_number="acme-store-2025-0001")
        with pytest.raises(NotFoundError):
            bills.replace(bill)
        assert bills.remove(tenant_id=TENANT_ID, bill_id=bill.bill_id) is False


class TestDbCatalog:
    def test_brand_is_resolved_by_name(self):
        _tenants()
        catalog = DbCatalog()
        first = _product(catalog, brand_name="Acme Tools")
        second = _product(catalog, name="Other", brand_name="Acme Tools")
        assert first.brand_id == second.brand_id
        assert db.Brand.objects.filter(tenant_id=TENANT_ID).count() == 1

    def test_stock_batch_is_atomic(self):
        _tenants()
        catalog = DbCatalog()
        widget = _product(catalog, stock=5)
        with pytest.raises(NotFoundError):
            catalog.apply_stock_deltas(
                tenant_id=TENANT_ID, deltas=[(widget.product_id, -2), (uuid.uuid4(), -1)],
            )
        assert catalog.get_product(tenant_id=TENANT_ID, product_id=widget.product_id).stock == 5

    def test_stock_after_each_delta(self):
        _tenants()
        catalog = DbCatalog()
        widget = _product(catalog, stock=5)
        assert catalog.apply_stock_deltas(
            tenant_id=TENANT_ID, deltas=[(widget.product_id, -2), (widget.product_id, 4)],
        ) == [3, 7]

    def test_other_tenant_product_is_invisible(self):
        _tenants()
        catalog = DbCatalog()
        foreign = _product(catalog, tenant_id=OTHER_TENANT_ID)
        assert catalog.get_products(tenant_id=TENANT_ID, product_ids=[foreign.product_id]) == {}
        with pytest.raises(NotFoundError):
            catalog.apply_stock_deltas(tenant_id=TENANT_ID, deltas=[(foreign.product_id, -1)])


class TestDbSequenceProvider:
    def test_increments_per_tenant_and_year(self):
        _tenants()
        provider = DbSequenceProvider()
        assert [provider.next_serial(tenant_id=TENANT_ID, year=2025) for _ in range(3)] == [1, 2, 3]
        assert provider.next_serial(tenant_id=TENANT_ID, year=2026) == 1
        assert provider.next_serial(tenant_id=OTHER_TENANT_ID, year=2025) == 1
        assert provider.current_serial(tenant_id=TENANT_ID, year=2025) == 3
        assert provider.current_serial(tenant_id=TENANT_ID, year=2024) == 0

    @pytest.mark.skipif(
        connection.vendor == "sqlite", reason="SQLite locks the whole table under concurrent writers",
    )
    def test_concurrent_callers_never_share_a_serial(self):
        _tenants()
        provider = DbSequenceProvider()
        issued: list[int] = []
        errors: list[Exception] = []
        lock = threading.Lock()

        def worker():
            try:
                for _ in range(10):
                    serial = provider.next_serial(tenant_id=TENANT_ID, year=2025)
                    with lock:
                        issued.append(serial)
            except Exception as exc:
                with lock:
                    errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(issued) == list(range(1, 81))
        assert provider.current_serial(tenant_id=TENANT_ID, year=2025) == 80


class TestDbNotificationsAndAudit:
    def test_notification_store_read_and_delete(self):
        _tenants()
        store = DbNotificationStore()
        older = store.add(Notification(
            notification_id=uuid.uuid4(), tenant_id=TENANT_ID, notification_type="BILL_CREATED",
            title="New Bill Created", message="first", created_at=NOW, data={"total": "10.00"},
        ))
        newer = store.add(Notification(
            notification_id=uuid.uuid4(), tenant_id=TENANT_ID, notification_type="LOW_STOCK",
            title="Low Stock Alert", message="second", created_at=NOW + timedelta(seconds=1),
        ))

        page = store.page_for_tenant(tenant_id=TENANT_ID, page=1, limit=10)
        assert [n.notification_id for n in page.items] == [newer.notification_id, older.notification_id]
        assert page.items[1].data == {"total": "10.00"}
        assert store.unread_count(tenant_id=TENANT_ID) == 2

        assert store.mark_read(tenant_id=OTHER_TENANT_ID, notification_id=older.notification_id) is None
        assert store.mark_read(tenant_id=TENANT_ID, notification_id=older.notification_id).read is True
        assert store.mark_all_read(tenant_id=TENANT_ID) == 1
        assert store.delete(tenant_id=TENANT_ID, notification_id=newer.notification_id) is True
        assert store.delete_all(tenant_id=TENANT_ID) == 1

    def test_audit_log_outlives_bill(self):
        _tenants()
        log = DbAuditLog()
        bill_id = uuid.uuid4()
        for offset, kind in enumerate((TRANSACTION_BILL_CREATED, TRANSACTION_BILL_DELETED)):
            log.append(create_audit_transaction(
                event_id=uuid.uuid4(), tenant_id=TENANT_ID, bill_id=bill_id,
                transaction_type=kind, invoice_number="acme-store-2025-0001",
                occurred_at=NOW + timedelta(seconds=offset), metadata={"n": offset},
            ))
        trail = log.list_for_bill(tenant_id=TENANT_ID, bill_id=bill_id)
        assert [t.transaction_type for t in trail] == [TRANSACTION_BILL_DELETED, TRANSACTION_BILL_CREATED]
        assert trail[1].metadata == {"n": 0}
        assert log.list_for_tenant(tenant_id=OTHER_TENANT_ID) == []


class TestBillingOverDatabase:
    def _deps(self, clock):
        catalog = DbCatalog()
        deps = assemble_dependencies(
            bills=DbBillRepository(),
            customers=DbCustomerDirectory(),
            tenants=_tenants(),
            catalog=catalog,
            sequence_provider=DbSequenceProvider(),
            notification_store=DbNotificationStore(),
            audit_log=DbAuditLog(),
            auth_provider=InMemoryAuthProvider({
                API_KEY: AuthPrincipal(actor_id="acme-cashier", tenant_id=TENANT_ID),
            }),
            clock=clock,
            unit_of_work_factory=unit_of_work,
        )
        return deps, catalog

    def _request(self, *lines, amount_paid="0"):
        return BillCreateRequest(
            items=tuple(BillLineRequest(product_id=p.product_id, quantity=q) for p, q in lines),
            payment_method="Cash",
            customer=CustomerCreateRequest(name="Jane Doe"),
            amount_paid=Decimal(amount_paid),
        )

    def test_create_update_delete(self):
        clock = FixedClock(NOW)
        deps, catalog = self._deps(clock)
        widget = _product(catalog, stock=7)

        bill = deps.billing_service.create_bill(
            tenant_id=TENANT_ID, request=self._request((widget, 3), amount_paid="100"),
        )
        assert bill.invoice_number == "acme-store-2025-0001"
        assert bill.total == Decimal("150.00")
        assert bill.status == "Pending"
        assert catalog.get_product(tenant_id=TENANT_ID, product_id=widget.product_id).stock == 4
        assert deps.notification_service.unread_count(tenant_id=TENANT_ID) == 2

        updated = deps.billing_service.update_bill(
            tenant_id=TENANT_ID, bill_id=bill.bill_id,
            request=BillUpdateRequest(amount_paid=Decimal("150")),
        )
        assert updated.status == "Paid"

        deps.billing_service.delete_bill(tenant_id=TENANT_ID, bill_id=bill.bill_id)
        assert catalog.get_product(tenant_id=TENANT_ID, product_id=widget.product_id).stock == 7
        assert db.Bill.objects.count() == 0
        assert db.BillLineItem.objects.count() == 0
        assert len(deps.audit_log.list_for_bill(tenant_id=TENANT_ID, bill_id=bill.bill_id)) == 3

    def test_missing_product_rolls_back_everything(self):
        deps, catalog = self._deps(FixedClock(NOW))
        widget = _product(catalog, stock=7)
        ghost = ProductSnapshot(
            product_id=uuid.uuid4(), tenant_id=TENANT_ID, name="Ghost", price=Decimal("1"), stock=0,
        )
        with pytest.raises(NotFoundError):
            deps.billing_service.create_bill(
                tenant_id=TENANT_ID, request=self._request((widget, 1), (ghost, 1)),
            )
        assert db.Bill.objects.count() == 0
        assert db.Customer.objects.count() == 0
        assert catalog.get_product(tenant_id=TENANT_ID, product_id=widget.product_id).stock == 7

    def test_invoice_year_rollover(self):
        clock = FixedClock(datetime(2025, 12, 31, 23, 59, tzinfo=timezone.utc))
        deps, catalog = self._deps(clock)
        widget = _product(catalog, stock=10)

        last = deps.billing_service.create_bill(tenant_id=TENANT_ID, request=self._request((widget, 1)))
        clock.advance(120)
        first = deps.billing_service.create_bill(tenant_id=TENANT_ID, request=self._request((widget, 1)))
        assert last.invoice_number == "acme-store-2025-0001"
        assert first.invoice_number == "acme-store-2026-0001"

    def test_reporting_over_database(self):
        deps, catalog = self._deps(FixedClock(NOW))
        widget = _product(catalog, price="10.00", stock=20)
        deps.billing_service.create_bill(tenant_id=TENANT_ID, request=self._request((widget, 2)))
        deps.billing_service.create_bill(tenant_id=TENANT_ID, request=self._request((widget, 1), amount_paid="10"))

        report = deps.reporting.report(tenant_id=TENANT_ID, window="day")
        assert report.total_sales == Decimal("30.00")
        assert report.top_products[0].quantity == 3
        assert deps.reporting.dashboard_totals(tenant_id=TENANT_ID) == {
            "totalSalesAllTime": "30.00", "totalPendingAmountAllTime": "20.00",
        }
