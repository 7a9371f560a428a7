"""Retail Ledger Billing Engine - event types and payload builders."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from engines.billing.models import Bill, Customer

BILLING_BILL_CREATED_V1 = "billing.bill.created.v1"
BILLING_BILL_UPDATED_V1 = "billing.bill.updated.v1"
BILLING_BILL_DELETED_V1 = "billing.bill.deleted.v1"

BILLING_EVENT_TYPES = (
    BILLING_BILL_CREATED_V1,
    BILLING_BILL_UPDATED_V1,
    BILLING_BILL_DELETED_V1,
)


@dataclass(frozen=True)
class BillItemSummary:
    product_id: uuid.UUID
    product_name: str
    quantity: int
    price: Decimal
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "productId": str(self.product_id),
            "productName": self.product_name or "Unknown Product",
            "quantity": self.quantity,
            "price": str(self.price),
            "description": self.description,
        }


@dataclass(frozen=True)
class _BillSnapshot:
    bill_id: uuid.UUID
    invoice_number: str
    customer_name: str
    customer_phone: str
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    amount_paid: Decimal
    remaining_amount: Decimal
    payment_status: str
    payment_method: str
    item_count: int

    def _snapshot_dict(self) -> dict:
        return {
            "billId": str(self.bill_id),
            "billNumber": self.invoice_number,
            "customerName": self.customer_name or "Unknown",
            "customerPhone": self.customer_phone or "",
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "totalAmount": str(self.total),
            "amountPaid": str(self.amount_paid),
            "remainingAmount": str(self.remaining_amount),
            "paymentStatus": self.payment_status,
            "paymentMethod": self.payment_method,
            "itemCount": self.item_count,
        }


@dataclass(frozen=True)
class BillCreatedPayload(_BillSnapshot):
    EVENT_TYPE = BILLING_BILL_CREATED_V1
    NOTIFICATION_TYPE = "BILL_CREATED"

    items: Tuple[BillItemSummary, ...] = ()
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = self._snapshot_dict()
        data["items"] = [item.to_dict() for item in self.items]
        data["createdAt"] = self.created_at.isoformat() if self.created_at else None
        return data


@dataclass(frozen=True)
class BillUpdatedPayload(_BillSnapshot):
    EVENT_TYPE = BILLING_BILL_UPDATED_V1
    NOTIFICATION_TYPE = "BILL_UPDATED"

    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = self._snapshot_dict()
        data["updatedAt"] = self.updated_at.isoformat() if self.updated_at else None
        return data


@dataclass(frozen=True)
class BillDeletedPayload(_BillSnapshot):
    EVENT_TYPE = BILLING_BILL_DELETED_V1
    NOTIFICATION_TYPE = "BILL_DELETED"

    deleted_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = self._snapshot_dict()
        data["deletedAt"] = self.deleted_at.isoformat() if self.deleted_at else None
        return data


def _snapshot_fields(bill: Bill, customer: Optional[Customer]) -> dict:
    return {
        "bill_id": bill.bill_id,
        "invoice_number": bill.invoice_number,
        "customer_name": customer.name if customer else "",
        "customer_phone": (customer.phone or "") if customer else "",
        "subtotal": bill.subtotal,
        "discount": bill.discount,
        "total": bill.total,
        "amount_paid": bill.amount_paid,
        "remaining_amount": bill.remaining_amount,
        "payment_status": bill.status,
        "payment_method": bill.payment_method,
        "item_count": bill.item_count,
    }


def build_bill_created_payload(
    bill: Bill,
    customer: Optional[Customer],
    descriptions: Optional[dict] = None,
) -> BillCreatedPayload:
    descriptions = descriptions or {}
    return BillCreatedPayload(
        **_snapshot_fields(bill, customer),
        items=tuple(
            BillItemSummary(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                price=item.price,
                description=descriptions.get(item.product_id, ""),
            )
            for item in bill.items
        ),
        created_at=bill.created_at,
    )


def build_bill_updated_payload(bill: Bill, customer: Optional[Customer]) -> BillUpdatedPayload:
    return BillUpdatedPayload(**_snapshot_fields(bill, customer), updated_at=bill.updated_at)


def build_bill_deleted_payload(
    bill: Bill, customer: Optional[Customer], deleted_at: datetime,
) -> BillDeletedPayload:
    return BillDeletedPayload(**_snapshot_fields(bill, customer), deleted_at=deleted_at)
