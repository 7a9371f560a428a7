"""
Retail Ledger Store - Relational Ledger State
============================================
Every row carries its tenant. Line items keep a product id and name
snapshot rather than a foreign key, so bills outlive catalog edits.
Notifications and audit transactions keep the bill id the same way
and survive bill deletion.
"""

from __future__ import annotations

from django.db import models


class PaymentMethod(models.TextChoices):
    CASH = "Cash", "Cash"
    ONLINE = "Online", "Online"


class BillStatus(models.TextChoices):
    PAID = "Paid", "Paid"
    PENDING = "Pending", "Pending"


class Tenant(models.Model):
    tenant_id = models.UUIDField(primary_key=True, editable=False)
    name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "ledger_tenants"
        ordering = ["tenant_id"]

    def __str__(self) -> str:
        return f"{self.tenant_id} ({self.name})"


class Brand(models.Model):
    brand_id = models.UUIDField(primary_key=True, editable=False)
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="brands",
        db_column="tenant_id",
    )
    name = models.CharField(max_length=255)

    class Meta:
        db_table = "ledger_brands"
        ordering = ["tenant_id", "name"]

    def __str__(self) -> str:
        return self.name


class Product(models.Model):
    product_id = models.UUIDField(primary_key=True, editable=False)
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="products",
        db_column="tenant_id",
    )
    brand = models.ForeignKey(
        Brand,
        on_delete=models.SET_NULL,
        related_name="products",
        db_column="brand_id",
        null=True,
        blank=True,
    )
    name = models.CharField(max_length=255)
    description = models.TextField(default="", blank=True)
    price = models.DecimalField(max_digits=14, decimal_places=2)
    stock = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "ledger_products"
        ordering = ["tenant_id", "name"]
        indexes = [
            models.Index(fields=["tenant", "product_id"], name="idx_product_tenant"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.stock})"


class Customer(models.Model):
    customer_id = models.UUIDField(primary_key=True, editable=False)
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="customers",
        db_column="tenant_id",
    )
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=64, null=True, blank=True)
    address = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField()

    class Meta:
        db_table = "ledger_customers"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name


class Bill(models.Model):
    bill_id = models.UUIDField(primary_key=True, editable=False)
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="bills",
        db_column="tenant_id",
    )
    invoice_number = models.CharField(max_length=128)
    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="bills",
        db_column="customer_id",
    )
    subtotal = models.DecimalField(max_digits=14, decimal_places=2)
    discount = models.DecimalField(max_digits=14, decimal_places=2)
    total = models.DecimalField(max_digits=14, decimal_places=2)
    payment_method = models.CharField(max_length=16, choices=PaymentMethod.choices)
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=16, choices=BillStatus.choices)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        db_table = "ledger_bills"
        ordering = ["-created_at", "-invoice_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "invoice_number"],
                name="uq_bill_tenant_invoice",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant", "created_at"], name="idx_bill_tenant_created"),
        ]

    def __str__(self) -> str:
        return self.invoice_number


class BillLineItem(models.Model):
    bill = models.ForeignKey(
        Bill,
        on_delete=models.CASCADE,
        related_name="line_items",
        db_column="bill_id",
    )
    position = models.PositiveIntegerField()
    product_id = models.UUIDField()
    product_name = models.CharField(max_length=255, default="", blank=True)
    quantity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        db_table = "ledger_bill_line_items"
        ordering = ["bill_id", "position"]

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity}"


class SequenceCounter(models.Model):
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="sequence_counters",
        db_column="tenant_id",
    )
    year = models.PositiveIntegerField()
    serial = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "ledger_sequence_counters"
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "year"],
                name="uq_sequence_tenant_year",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.tenant_id}/{self.year}: {self.serial}"


class Notification(models.Model):
    notification_id = models.UUIDField(unique=True, editable=False)
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="notifications",
        db_column="tenant_id",
    )
    notification_type = models.CharField(max_length=32)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict)
    read = models.BooleanField(default=False)
    event_id = models.UUIDField(null=True, blank=True)
    created_at = models.DateTimeField()

    class Meta:
        db_table = "ledger_notifications"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["tenant", "notification_type"], name="idx_notif_tenant_type"),
            models.Index(fields=["tenant", "read"], name="idx_notif_tenant_read"),
        ]

    def __str__(self) -> str:
        return f"{self.notification_type}: {self.title}"


class AuditTransaction(models.Model):
    transaction_id = models.UUIDField(unique=True, editable=False)
    event_id = models.UUIDField()
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="audit_transactions",
        db_column="tenant_id",
    )
    bill_id = models.UUIDField()
    transaction_type = models.CharField(max_length=32)
    title = models.CharField(max_length=255)
    message = models.TextField()
    metadata = models.JSONField(default=dict)
    occurred_at = models.DateTimeField()

    class Meta:
        db_table = "ledger_audit_transactions"
        ordering = ["-occurred_at", "-id"]
        indexes = [
            models.Index(fields=["tenant", "bill_id"], name="idx_audit_tenant_bill"),
        ]

    def __str__(self) -> str:
        return f"{self.transaction_type} {self.bill_id}"
