"""
Retail Ledger HTTP API - Contracts
===================================
Framework-agnostic request/response DTOs and JSON body parsers.
Wire keys are camelCase; Python fields are snake_case.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from engines.billing.commands import (
    BillCreateRequest,
    BillLineRequest,
    BillUpdateRequest,
    CustomerCreateRequest,
)
from engines.billing.errors import ValidationError
from engines.billing.policies import clamp_limit, clamp_page, parse_money
from engines.billing.models import ZERO
from engines.reporting.policies import WINDOW_ALL, validate_window

BILL_PATCH_FIELDS = frozenset({"amountPaid", "paymentMethod", "status"})


# ══════════════════════════════════════════════════════════════
# READ REQUESTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PageReadRequest:
    page: int = 1
    limit: int = 10

    def __post_init__(self):
        if not isinstance(self.page, int) or self.page < 1:
            raise ValueError("page must be int >= 1.")
        if not isinstance(self.limit, int) or not 1 <= self.limit <= 100:
            raise ValueError("limit must be int in [1, 100].")


@dataclass(frozen=True)
class BillIdRequest:
    bill_id: uuid.UUID

    def __post_init__(self):
        if not isinstance(self.bill_id, uuid.UUID):
            raise ValueError("bill_id must be UUID.")


@dataclass(frozen=True)
class NotificationIdRequest:
    notification_id: uuid.UUID

    def __post_init__(self):
        if not isinstance(self.notification_id, uuid.UUID):
            raise ValueError("notification_id must be UUID.")


@dataclass(frozen=True)
class NotificationTypeReadRequest:
    notification_type: str
    page: PageReadRequest = field(default_factory=PageReadRequest)

    def __post_init__(self):
        if not self.notification_type or not isinstance(self.notification_type, str):
            raise ValueError("notification_type must be a non-empty string.")


@dataclass(frozen=True)
class SalesReportReadRequest:
    window: str = WINDOW_ALL

    def __post_init__(self):
        validate_window(self.window)


# ══════════════════════════════════════════════════════════════
# PARSERS
# ══════════════════════════════════════════════════════════════

def parse_uuid(value: Any, *, field_name: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a valid id.", field=field_name)
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be a valid id.", field=field_name)


def _require_object(body: Any) -> dict:
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object.")
    return body


def parse_page_query(query: Optional[dict]) -> PageReadRequest:
    query = query or {}
    return PageReadRequest(page=clamp_page(query.get("page")), limit=clamp_limit(query.get("limit")))


def parse_customer_create_body(body: Any) -> CustomerCreateRequest:
    body = _require_object(body)
    return CustomerCreateRequest(
        name=body.get("name"),
        phone=body.get("phone"),
        address=body.get("address"),
    )


def _parse_line(raw: Any, index: int) -> BillLineRequest:
    if not isinstance(raw, dict):
        raise ValidationError(f"items[{index}] must be an object.", field="items")
    return BillLineRequest(
        product_id=parse_uuid(raw.get("productId"), field_name=f"items[{index}].productId"),
        quantity=raw.get("quantity"),
    )


def parse_bill_create_body(body: Any) -> BillCreateRequest:
    body = _require_object(body)
    raw_items = body.get("items") or []
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list.", field="items")

    raw_customer = body.get("customer")
    customer = None
    if isinstance(raw_customer, dict) and raw_customer.get("name"):
        customer = parse_customer_create_body(raw_customer)
    elif raw_customer is not None and not isinstance(raw_customer, dict):
        raise ValidationError("customer must be an object.", field="customer")

    customer_id = body.get("customerId")
    return BillCreateRequest(
        items=tuple(_parse_line(raw, i) for i, raw in enumerate(raw_items)),
        payment_method=body.get("paymentMethod"),
        customer_id=parse_uuid(customer_id, field_name="customerId") if customer_id else None,
        customer=customer,
        discount=parse_money(body.get("discount"), field="discount", default=ZERO),
        amount_paid=parse_money(body.get("amountPaid"), field="amountPaid", default=ZERO),
    )


def parse_bill_update_body(body: Any) -> BillUpdateRequest:
    body = _require_object(body)
    unknown = set(body) - BILL_PATCH_FIELDS
    if unknown:
        raise ValidationError(
            f"Only {sorted(BILL_PATCH_FIELDS)} can be updated; got {sorted(unknown)}.",
        )
    amount_paid = body.get("amountPaid")
    return BillUpdateRequest(
        amount_paid=parse_money(amount_paid, field="amountPaid") if amount_paid is not None else None,
        payment_method=body.get("paymentMethod"),
        status=body.get("status"),
    )


# ══════════════════════════════════════════════════════════════
# RESPONSES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        if self.error is None:
            raise ValueError("error must be set when ok is False.")
        return {"ok": False, "error": self.error.to_dict()}
