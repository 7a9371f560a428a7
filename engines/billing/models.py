"""
Retail Ledger Billing Engine - Ledger Records
==============================================
Frozen records for the billing ledger.

A Bill is written once with its line items. Afterwards only the
payment fields (amount paid, payment method) change, and status is
always re-derived from amount paid against the stored total.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple


PAYMENT_METHOD_CASH = "Cash"
PAYMENT_METHOD_ONLINE = "Online"
VALID_PAYMENT_METHODS = frozenset({PAYMENT_METHOD_CASH, PAYMENT_METHOD_ONLINE})

BILL_STATUS_PAID = "Paid"
BILL_STATUS_PENDING = "Pending"
VALID_BILL_STATUSES = frozenset({BILL_STATUS_PAID, BILL_STATUS_PENDING})

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class TenantRecord:
    tenant_id: uuid.UUID
    name: str


@dataclass(frozen=True)
class Customer:
    customer_id: uuid.UUID
    tenant_id: uuid.UUID
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": str(self.customer_id),
            "name": self.name,
            "phone": self.phone,
            "address": self.address,
        }


@dataclass(frozen=True)
class LineItem:
    """One product/quantity/unit-price-snapshot entry of a bill."""

    product_id: uuid.UUID
    quantity: int
    price: Decimal
    product_name: str = ""

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError("quantity must be an integer.")
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1.")
        if not isinstance(self.price, Decimal) or self.price < 0:
            raise ValueError("price must be a non-negative Decimal.")

    @property
    def line_total(self) -> Decimal:
        return (self.price * self.quantity).quantize(CENT)


@dataclass(frozen=True)
class Bill:
    bill_id: uuid.UUID
    tenant_id: uuid.UUID
    invoice_number: str
    customer_id: uuid.UUID
    items: Tuple[LineItem, ...]
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    payment_method: str
    amount_paid: Decimal
    status: str
    created_at: datetime
    updated_at: datetime
    customer: Optional[Customer] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.items:
            raise ValueError("a bill must carry at least one line item.")
        if self.payment_method not in VALID_PAYMENT_METHODS:
            raise ValueError(f"payment_method '{self.payment_method}' is not valid.")
        if self.status not in VALID_BILL_STATUSES:
            raise ValueError(f"status '{self.status}' is not valid.")

    @property
    def remaining_amount(self) -> Decimal:
        return max(ZERO, self.total - self.amount_paid).quantize(CENT)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def quantity_by_product(self) -> dict[uuid.UUID, int]:
        quantities: dict[uuid.UUID, int] = {}
        for item in self.items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
        return quantities

    def with_payment(
        self,
        *,
        amount_paid: Decimal,
        payment_method: str,
        status: str,
        updated_at: datetime,
    ) -> "Bill":
        return replace(
            self,
            amount_paid=amount_paid,
            payment_method=payment_method,
            status=status,
            updated_at=updated_at,
        )

    def with_customer(self, customer: Optional[Customer]) -> "Bill":
        return replace(self, customer=customer)

    def to_dict(self) -> dict:
        return {
            "id": str(self.bill_id),
            "tenantId": str(self.tenant_id),
            "invoiceNumber": self.invoice_number,
            "customerId": str(self.customer_id),
            "customer": self.customer.to_dict() if self.customer else None,
            "items": [
                {
                    "productId": str(item.product_id),
                    "productName": item.product_name,
                    "quantity": item.quantity,
                    "price": str(item.price),
                    "lineTotal": str(item.line_total),
                }
                for item in self.items
            ],
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "total": str(self.total),
            "paymentMethod": self.payment_method,
            "amountPaid": str(self.amount_paid),
            "remainingAmount": str(self.remaining_amount),
            "status": self.status,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class Page:
    """One page of a tenant-scoped listing."""

    items: Tuple
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def to_dict(self, serialize=lambda item: item.to_dict()) -> dict:
        return {
            "items": [serialize(item) for item in self.items],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }
