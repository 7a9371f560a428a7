"""
Retail Ledger Notifications Engine - Event Subscriptions
=========================================================
Every ledger and catalog event becomes one tenant notification.

Subscriptions:
- billing.bill.created/updated/deleted  -> BILL_* notification
- inventory.stock.low                   -> LOW_STOCK
- inventory.product.created/updated/deleted -> PRODUCT_*
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Dict

from core.events.envelope import LedgerEvent
from core.events.registry import SubscriberRegistry
from engines.billing.events import (
    BILLING_BILL_CREATED_V1,
    BILLING_BILL_DELETED_V1,
    BILLING_BILL_UPDATED_V1,
)
from engines.inventory.events import (
    INVENTORY_PRODUCT_CREATED_V1,
    INVENTORY_PRODUCT_DELETED_V1,
    INVENTORY_PRODUCT_UPDATED_V1,
    INVENTORY_STOCK_LOW_V1,
)
from engines.notifications.services import NotificationService

NOTIFICATIONS_SUBSCRIBER_ENGINE = "notifications"


def _bill_created(p) -> tuple[str, str]:
    total = Decimal(p.total)
    return (
        "New Bill Created",
        f"Bill {p.invoice_number} created for {p.customer_name or 'Customer'} - Amount: {total:.2f}",
    )


def _bill_updated(p) -> tuple[str, str]:
    return "Bill Updated", f"Bill {p.invoice_number} updated"


def _bill_deleted(p) -> tuple[str, str]:
    return "Bill Deleted", f"Bill {p.invoice_number} deleted and stock restored"


def _low_stock(p) -> tuple[str, str]:
    return "Low Stock Alert", f'Only {p.stock} units remaining for "{p.product_name}"'


def _product_created(p) -> tuple[str, str]:
    return (
        "New Product Created",
        f'Product "{p.product_name}" has been created under brand "{p.brand_name}"',
    )


def _product_updated(p) -> tuple[str, str]:
    return "Product Updated", f'Product "{p.product_name}" has been updated'


def _product_deleted(p) -> tuple[str, str]:
    return "Product Deleted", f'Product "{p.product_name}" has been deleted'


NOTIFICATION_SUBSCRIPTIONS: Dict[str, Callable] = {
    BILLING_BILL_CREATED_V1: _bill_created,
    BILLING_BILL_UPDATED_V1: _bill_updated,
    BILLING_BILL_DELETED_V1: _bill_deleted,
    INVENTORY_STOCK_LOW_V1: _low_stock,
    INVENTORY_PRODUCT_CREATED_V1: _product_created,
    INVENTORY_PRODUCT_UPDATED_V1: _product_updated,
    INVENTORY_PRODUCT_DELETED_V1: _product_deleted,
}


class NotificationSubscriptionHandler:
    def __init__(self, notification_service: NotificationService):
        self._service = notification_service

    def __call__(self, event: LedgerEvent) -> None:
        title, message = NOTIFICATION_SUBSCRIPTIONS[event.event_type](event.payload)
        self._service.create_notification(
            tenant_id=event.tenant_id,
            notification_type=event.notification_type,
            title=title,
            message=message,
            data=event.payload.to_dict(),
            event_id=event.event_id,
            created_at=event.occurred_at,
        )


def register_notification_subscriptions(
    registry: SubscriberRegistry, notification_service: NotificationService,
) -> NotificationSubscriptionHandler:
    handler = NotificationSubscriptionHandler(notification_service)
    for event_type in NOTIFICATION_SUBSCRIPTIONS:
        registry.register_subscriber(
            event_type,
            handler,
            subscriber_engine=NOTIFICATIONS_SUBSCRIBER_ENGINE,
            name=f"notifications:{event_type}",
        )
    return handler
