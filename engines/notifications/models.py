"""Retail Ledger Notifications Engine - records."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

NOTIFICATION_BILL_CREATED = "BILL_CREATED"
NOTIFICATION_BILL_UPDATED = "BILL_UPDATED"
NOTIFICATION_BILL_DELETED = "BILL_DELETED"
NOTIFICATION_LOW_STOCK = "LOW_STOCK"
NOTIFICATION_PAYMENT_PENDING = "PAYMENT_PENDING"
NOTIFICATION_PRODUCT_CREATED = "PRODUCT_CREATED"
NOTIFICATION_PRODUCT_UPDATED = "PRODUCT_UPDATED"
NOTIFICATION_PRODUCT_DELETED = "PRODUCT_DELETED"

VALID_NOTIFICATION_TYPES = frozenset({
    NOTIFICATION_BILL_CREATED,
    NOTIFICATION_BILL_UPDATED,
    NOTIFICATION_BILL_DELETED,
    NOTIFICATION_LOW_STOCK,
    NOTIFICATION_PAYMENT_PENDING,
    NOTIFICATION_PRODUCT_CREATED,
    NOTIFICATION_PRODUCT_UPDATED,
    NOTIFICATION_PRODUCT_DELETED,
})


@dataclass(frozen=True)
class Notification:
    notification_id: uuid.UUID
    tenant_id: uuid.UUID
    notification_type: str
    title: str
    message: str
    created_at: datetime
    data: dict = field(default_factory=dict)
    read: bool = False
    event_id: Optional[uuid.UUID] = None

    def __post_init__(self):
        if self.notification_type not in VALID_NOTIFICATION_TYPES:
            raise ValueError(f"notification_type '{self.notification_type}' is not valid.")
        if not self.title:
            raise ValueError("title must be non-empty.")

    def mark_read(self) -> "Notification":
        return replace(self, read=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.notification_id),
            "type": self.notification_type,
            "title": self.title,
            "message": self.message,
            "data": dict(self.data),
            "read": self.read,
            "createdAt": self.created_at.isoformat(),
        }
