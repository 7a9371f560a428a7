"""
Retail Ledger Store - Database Repositories
===========================================
Django ORM implementations of the storage protocols:

DbTenantDirectory     TenantDirectory
DbCustomerDirectory   CustomerDirectory
DbBillRepository      BillRepository
DbCatalog             CatalogReader + CatalogWriter + StockLedger
DbSequenceProvider    SequenceProvider
DbNotificationStore   NotificationStore
DbAuditLog            AuditLog

Rows are converted to the engines' frozen records on the way out;
no model instance leaves this module.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Iterable, Optional, Sequence

from django.db import IntegrityError, transaction
from django.db.models import F

from core.audit.models import AuditTransaction
from core.ledger_store import models as db
from engines.billing.errors import ConflictError, NotFoundError, ValidationError
from engines.billing.models import Bill, Customer, LineItem, Page, TenantRecord
from engines.inventory.catalog import ProductSnapshot, StockDelta
from engines.notifications.models import Notification

logger = logging.getLogger("ledger.store")

SEQUENCE_MAX_ATTEMPTS = 5


def unit_of_work():
    """One database transaction around a ledger write."""
    return transaction.atomic()


def _page(queryset, *, page: int, limit: int, convert) -> Page:
    total = queryset.count()
    offset = (page - 1) * limit
    return Page(
        items=tuple(convert(row) for row in queryset[offset:offset + limit]),
        total=total,
        page=page,
        limit=limit,
    )


# ══════════════════════════════════════════════════════════════
# TENANTS / CUSTOMERS
# ══════════════════════════════════════════════════════════════

class DbTenantDirectory:
    def add(self, tenant: TenantRecord) -> TenantRecord:
        db.Tenant.objects.update_or_create(
            tenant_id=tenant.tenant_id, defaults={"name": tenant.name},
        )
        return tenant

    def get(self, tenant_id: uuid.UUID) -> Optional[TenantRecord]:
        row = db.Tenant.objects.filter(tenant_id=tenant_id).first()
        if row is None:
            return None
        return TenantRecord(tenant_id=row.tenant_id, name=row.name)


def _customer_from_row(row: db.Customer) -> Customer:
    return Customer(
        customer_id=row.customer_id,
        tenant_id=row.tenant_id,
        name=row.name,
        phone=row.phone,
        address=row.address,
        created_at=row.created_at,
    )


class DbCustomerDirectory:
    def add(self, customer: Customer) -> Customer:
        try:
            with transaction.atomic():
                db.Customer.objects.create(
                    customer_id=customer.customer_id,
                    tenant_id=customer.tenant_id,
                    name=customer.name,
                    phone=customer.phone,
                    address=customer.address,
                    created_at=customer.created_at,
                )
        except IntegrityError as exc:
            raise ConflictError(f"Customer {customer.customer_id} already exists.") from exc
        return customer

    def get(self, *, tenant_id: uuid.UUID, customer_id: uuid.UUID) -> Optional[Customer]:
        row = db.Customer.objects.filter(tenant_id=tenant_id, customer_id=customer_id).first()
        return _customer_from_row(row) if row else None

    def get_many(
        self, *, tenant_id: uuid.UUID, customer_ids: Iterable[uuid.UUID],
    ) -> dict[uuid.UUID, Customer]:
        rows = db.Customer.objects.filter(tenant_id=tenant_id, customer_id__in=set(customer_ids))
        return {row.customer_id: _customer_from_row(row) for row in rows}

    def list_for_tenant(self, *, tenant_id: uuid.UUID) -> list[Customer]:
        rows = db.Customer.objects.filter(tenant_id=tenant_id).order_by("-created_at", "-name")
        return [_customer_from_row(row) for row in rows]

    def remove(self, *, tenant_id: uuid.UUID, customer_id: uuid.UUID) -> bool:
        deleted, _ = db.Customer.objects.filter(tenant_id=tenant_id, customer_id=customer_id).delete()
        return deleted > 0


# ══════════════════════════════════════════════════════════════
# BILLS
# ══════════════════════════════════════════════════════════════

def _bill_from_row(row: db.Bill) -> Bill:
    return Bill(
        bill_id=row.bill_id,
        tenant_id=row.tenant_id,
        invoice_number=row.invoice_number,
        customer_id=row.customer_id,
        items=tuple(
            LineItem(
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
                product_name=item.product_name,
            )
            for item in sorted(row.line_items.all(), key=lambda i: i.position)
        ),
        subtotal=row.subtotal,
        discount=row.discount,
        total=row.total,
        payment_method=row.payment_method,
        amount_paid=row.amount_paid,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DbBillRepository:
    def _rows(self, tenant_id: uuid.UUID):
        return (
            db.Bill.objects.filter(tenant_id=tenant_id)
            .prefetch_related("line_items")
            .order_by("-created_at", "-invoice_number")
        )

    def add(self, bill: Bill) -> Bill:
        try:
            with transaction.atomic():
                row = db.Bill.objects.create(
                    bill_id=bill.bill_id,
                    tenant_id=bill.tenant_id,
                    invoice_number=bill.invoice_number,
                    customer_id=bill.customer_id,
                    subtotal=bill.subtotal,
                    discount=bill.discount,
                    total=bill.total,
                    payment_method=bill.payment_method,
                    amount_paid=bill.amount_paid,
                    status=bill.status,
                    created_at=bill.created_at,
                    updated_at=bill.updated_at,
                )
                db.BillLineItem.objects.bulk_create([
                    db.BillLineItem(
                        bill=row,
                        position=position,
                        product_id=item.product_id,
                        product_name=item.product_name,
                        quantity=item.quantity,
                        price=item.price,
                    )
                    for position, item in enumerate(bill.items)
                ])
        except IntegrityError as exc:
            raise ConflictError(
                f"Invoice number {bill.invoice_number} already exists for tenant."
            ) from exc
        return bill

    def get(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> Optional[Bill]:
        row = self._rows(tenant_id).filter(bill_id=bill_id).first()
        return _bill_from_row(row) if row else None

    def replace(self, bill: Bill) -> Bill:
        updated = db.Bill.objects.filter(tenant_id=bill.tenant_id, bill_id=bill.bill_id).update(
            amount_paid=bill.amount_paid,
            payment_method=bill.payment_method,
            status=bill.status,
            updated_at=bill.updated_at,
        )
        if not updated:
            raise NotFoundError("Bill", bill.bill_id, message="Bill not found")
        return bill

    def remove(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> bool:
        deleted, _ = db.Bill.objects.filter(tenant_id=tenant_id, bill_id=bill_id).delete()
        return deleted > 0

    def page_for_tenant(self, *, tenant_id: uuid.UUID, page: int, limit: int) -> Page:
        return _page(self._rows(tenant_id), page=page, limit=limit, convert=_bill_from_row)

    def in_window(
        self,
        *,
        tenant_id: uuid.UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Bill]:
        rows = self._rows(tenant_id)
        if start is not None:
            rows = rows.filter(created_at__gte=start)
        if end is not None:
            rows = rows.filter(created_at__lte=end)
        return [_bill_from_row(row) for row in rows]

    def count_for_tenant(self, *, tenant_id: uuid.UUID) -> int:
        return db.Bill.objects.filter(tenant_id=tenant_id).count()


# ══════════════════════════════════════════════════════════════
# CATALOG / STOCK
# ══════════════════════════════════════════════════════════════

def _product_from_row(row: db.Product) -> ProductSnapshot:
    return ProductSnapshot(
        product_id=row.product_id,
        tenant_id=row.tenant_id,
        name=row.name,
        price=row.price,
        stock=row.stock,
        brand_id=row.brand_id,
        brand_name=row.brand.name if row.brand else "",
        description=row.description,
    )


class DbCatalog:
    """Catalog reader, writer and stock ledger over the product table."""

    def _rows(self, tenant_id: uuid.UUID):
        return db.Product.objects.filter(tenant_id=tenant_id).select_related("brand")

    def _resolve_brand(self, snapshot: ProductSnapshot) -> Optional[uuid.UUID]:
        if snapshot.brand_id is not None:
            db.Brand.objects.get_or_create(
                brand_id=snapshot.brand_id,
                defaults={"tenant_id": snapshot.tenant_id, "name": snapshot.brand_name},
            )
            return snapshot.brand_id
        if snapshot.brand_name:
            brand = db.Brand.objects.filter(
                tenant_id=snapshot.tenant_id, name=snapshot.brand_name,
            ).first()
            if brand is None:
                brand = db.Brand.objects.create(
                    brand_id=uuid.uuid4(), tenant_id=snapshot.tenant_id, name=snapshot.brand_name,
                )
            return brand.brand_id
        return None

    def add_product(self, snapshot: ProductSnapshot) -> ProductSnapshot:
        try:
            with transaction.atomic():
                brand_id = self._resolve_brand(snapshot)
                db.Product.objects.create(
                    product_id=snapshot.product_id,
                    tenant_id=snapshot.tenant_id,
                    brand_id=brand_id,
                    name=snapshot.name,
                    description=snapshot.description,
                    price=snapshot.price,
                    stock=snapshot.stock,
                )
        except IntegrityError as exc:
            raise ValidationError(f"Product {snapshot.product_id} already exists.") from exc
        return self.get_product(tenant_id=snapshot.tenant_id, product_id=snapshot.product_id)

    def replace_product(self, snapshot: ProductSnapshot) -> ProductSnapshot:
        with transaction.atomic():
            brand_id = self._resolve_brand(snapshot)
            updated = db.Product.objects.filter(
                tenant_id=snapshot.tenant_id, product_id=snapshot.product_id,
            ).update(
                brand_id=brand_id,
                name=snapshot.name,
                description=snapshot.description,
                price=snapshot.price,
                stock=snapshot.stock,
            )
            if not updated:
                raise NotFoundError("Product", snapshot.product_id)
        return self.get_product(tenant_id=snapshot.tenant_id, product_id=snapshot.product_id)

    def remove_product(self, *, tenant_id: uuid.UUID, product_id: uuid.UUID) -> ProductSnapshot:
        row = self._rows(tenant_id).filter(product_id=product_id).first()
        if row is None:
            raise NotFoundError("Product", product_id)
        snapshot = _product_from_row(row)
        row.delete()
        return snapshot

    def get_product(self, *, tenant_id: uuid.UUID, product_id: uuid.UUID) -> Optional[ProductSnapshot]:
        row = self._rows(tenant_id).filter(product_id=product_id).first()
        return _product_from_row(row) if row else None

    def get_products(
        self, *, tenant_id: uuid.UUID, product_ids: Iterable[uuid.UUID],
    ) -> dict[uuid.UUID, ProductSnapshot]:
        rows = self._rows(tenant_id).filter(product_id__in=set(product_ids))
        return {row.product_id: _product_from_row(row) for row in rows}

    def apply_stock_deltas(
        self, *, tenant_id: uuid.UUID, deltas: Sequence[StockDelta],
    ) -> list[int]:
        stock_after: list[int] = []
        with transaction.atomic():
            for product_id, delta in deltas:
                rows = db.Product.objects.filter(tenant_id=tenant_id, product_id=product_id)
                if not rows.update(stock=F("stock") + delta):
                    raise NotFoundError("Product", product_id)
                stock_after.append(rows.values_list("stock", flat=True).get())
        logger.debug(f"Applied {len(deltas)} stock deltas for tenant {tenant_id}")
        return stock_after


# ══════════════════════════════════════════════════════════════
# INVOICE COUNTERS
# ══════════════════════════════════════════════════════════════

class DbSequenceProvider:
    """
    One counter row per (tenant, year). The advance is a single
    UPDATE ... SET serial = serial + 1; the first serial of a year is an
    INSERT, and a lost insert race falls back to the UPDATE.
    """

    def __init__(self, max_attempts: int = SEQUENCE_MAX_ATTEMPTS):
        self._max_attempts = max_attempts

    def next_serial(self, *, tenant_id: uuid.UUID, year: int) -> int:
        year = int(year)
        for attempt in range(1, self._max_attempts + 1):
            try:
                with transaction.atomic():
                    counter = db.SequenceCounter.objects.filter(tenant_id=tenant_id, year=year)
                    if counter.update(serial=F("serial") + 1):
                        return counter.values_list("serial", flat=True).get()
                    db.SequenceCounter.objects.create(tenant_id=tenant_id, year=year, serial=1)
                    return 1
            except IntegrityError:
                logger.debug(
                    f"Counter insert race for tenant {tenant_id} year {year} (attempt {attempt})"
                )
        raise ConflictError(f"Could not allocate an invoice serial for {tenant_id}/{year}.")

    def current_serial(self, *, tenant_id: uuid.UUID, year: int) -> int:
        serial = (
            db.SequenceCounter.objects.filter(tenant_id=tenant_id, year=int(year))
            .values_list("serial", flat=True)
            .first()
        )
        return serial or 0


# ══════════════════════════════════════════════════════════════
# NOTIFICATIONS / AUDIT
# ══════════════════════════════════════════════════════════════

def _notification_from_row(row: db.Notification) -> Notification:
    return Notification(
        notification_id=row.notification_id,
        tenant_id=row.tenant_id,
        notification_type=row.notification_type,
        title=row.title,
        message=row.message,
        created_at=row.created_at,
        data=dict(row.data or {}),
        read=row.read,
        event_id=row.event_id,
    )


class DbNotificationStore:
    def add(self, notification: Notification) -> Notification:
        db.Notification.objects.create(
            notification_id=notification.notification_id,
            tenant_id=notification.tenant_id,
            notification_type=notification.notification_type,
            title=notification.title,
            message=notification.message,
            data=notification.data,
            read=notification.read,
            event_id=notification.event_id,
            created_at=notification.created_at,
        )
        return notification

    def page_for_tenant(
        self,
        *,
        tenant_id: uuid.UUID,
        page: int,
        limit: int,
        notification_type: Optional[str] = None,
    ) -> Page:
        rows = db.Notification.objects.filter(tenant_id=tenant_id).order_by("-created_at", "-id")
        if notification_type is not None:
            rows = rows.filter(notification_type=notification_type)
        return _page(rows, page=page, limit=limit, convert=_notification_from_row)

    def unread_count(self, *, tenant_id: uuid.UUID) -> int:
        return db.Notification.objects.filter(tenant_id=tenant_id, read=False).count()

    def mark_read(self, *, tenant_id: uuid.UUID, notification_id: uuid.UUID) -> Optional[Notification]:
        rows = db.Notification.objects.filter(tenant_id=tenant_id, notification_id=notification_id)
        if not rows.update(read=True):
            return None
        return _notification_from_row(rows.get())

    def mark_all_read(self, *, tenant_id: uuid.UUID) -> int:
        return db.Notification.objects.filter(tenant_id=tenant_id, read=False).update(read=True)

    def delete(self, *, tenant_id: uuid.UUID, notification_id: uuid.UUID) -> bool:
        deleted, _ = db.Notification.objects.filter(
            tenant_id=tenant_id, notification_id=notification_id,
        ).delete()
        return deleted > 0

    def delete_all(self, *, tenant_id: uuid.UUID) -> int:
        deleted, _ = db.Notification.objects.filter(tenant_id=tenant_id).delete()
        return deleted


def _transaction_from_row(row: db.AuditTransaction) -> AuditTransaction:
    return AuditTransaction(
        transaction_id=row.transaction_id,
        event_id=row.event_id,
        tenant_id=row.tenant_id,
        bill_id=row.bill_id,
        transaction_type=row.transaction_type,
        title=row.title,
        message=row.message,
        occurred_at=row.occurred_at,
        metadata=dict(row.metadata or {}),
    )


class DbAuditLog:
    def append(self, transaction_record: AuditTransaction) -> AuditTransaction:
        db.AuditTransaction.objects.create(
            transaction_id=transaction_record.transaction_id,
            event_id=transaction_record.event_id,
            tenant_id=transaction_record.tenant_id,
            bill_id=transaction_record.bill_id,
            transaction_type=transaction_record.transaction_type,
            title=transaction_record.title,
            message=transaction_record.message,
            metadata=transaction_record.metadata,
            occurred_at=transaction_record.occurred_at,
        )
        return transaction_record

    def _rows(self, **filters) -> list[AuditTransaction]:
        rows = db.AuditTransaction.objects.filter(**filters).order_by("-occurred_at", "-id")
        return [_transaction_from_row(row) for row in rows]

    def list_for_tenant(self, *, tenant_id: uuid.UUID) -> list[AuditTransaction]:
        return self._rows(tenant_id=tenant_id)

    def list_for_bill(self, *, tenant_id: uuid.UUID, bill_id: uuid.UUID) -> list[AuditTransaction]:
        return self._rows(tenant_id=tenant_id, bill_id=bill_id)
