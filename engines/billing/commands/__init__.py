"""Retail Ledger Billing Engine - request commands."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from engines.billing.errors import ValidationError
from engines.billing.models import VALID_BILL_STATUSES, VALID_PAYMENT_METHODS, ZERO


def _clean_optional(value: Optional[str], field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string.", field=field)
    return value.strip() or None


def _require_decimal(value, field: str) -> None:
    if not isinstance(value, Decimal) or not value.is_finite():
        raise ValidationError(f"{field} must be a finite Decimal.", field=field)
    if value < 0:
        raise ValidationError(f"{field} must be >= 0.", field=field)


@dataclass(frozen=True)
class CustomerCreateRequest:
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Customer name is required.", field="name")
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "phone", _clean_optional(self.phone, "phone"))
        object.__setattr__(self, "address", _clean_optional(self.address, "address"))


@dataclass(frozen=True)
class BillLineRequest:
    product_id: uuid.UUID
    quantity: int

    def __post_init__(self):
        if not isinstance(self.product_id, uuid.UUID):
            raise ValidationError("productId must be UUID.", field="productId")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError("quantity must be an integer.", field="quantity")
        if self.quantity < 1:
            raise ValidationError("quantity must be >= 1.", field="quantity")


@dataclass(frozen=True)
class BillCreateRequest:
    """
    Cart to bill. Either customer_id or an inline customer with a
    non-empty name is required. Discount and amount paid default to 0.
    """

    items: Tuple[BillLineRequest, ...]
    payment_method: str
    customer_id: Optional[uuid.UUID] = None
    customer: Optional[CustomerCreateRequest] = None
    discount: Decimal = ZERO
    amount_paid: Decimal = ZERO

    def __post_init__(self):
        if not self.items:
            raise ValidationError("Items are required", field="items")
        for item in self.items:
            if not isinstance(item, BillLineRequest):
                raise ValidationError("items must be BillLineRequest.", field="items")
        if self.customer_id is None and self.customer is None:
            raise ValidationError("Customer info is required", field="customer")
        if self.customer_id is not None and not isinstance(self.customer_id, uuid.UUID):
            raise ValidationError("customerId must be UUID.", field="customerId")
        if self.payment_method not in VALID_PAYMENT_METHODS:
            raise ValidationError(
                f"paymentMethod must be one of {sorted(VALID_PAYMENT_METHODS)}.",
                field="paymentMethod",
            )
        _require_decimal(self.discount, "discount")
        _require_decimal(self.amount_paid, "amountPaid")


@dataclass(frozen=True)
class BillUpdateRequest:
    """
    Payment amendment. A caller-supplied status is accepted for
    validation only; the stored status is always re-derived.
    """

    amount_paid: Optional[Decimal] = None
    payment_method: Optional[str] = None
    status: Optional[str] = None

    def __post_init__(self):
        if self.amount_paid is not None:
            _require_decimal(self.amount_paid, "amountPaid")
        if self.payment_method is not None and self.payment_method not in VALID_PAYMENT_METHODS:
            raise ValidationError(
                f"paymentMethod must be one of {sorted(VALID_PAYMENT_METHODS)}.",
                field="paymentMethod",
            )
        if self.status is not None and self.status not in VALID_BILL_STATUSES:
            raise ValidationError(
                f"status must be one of {sorted(VALID_BILL_STATUSES)}.",
                field="status",
            )

    @property
    def is_empty(self) -> bool:
        return self.amount_paid is None and self.payment_method is None and self.status is None
