"""
Retail Ledger Core Audit - Event Subscriptions
===============================================
Records one AuditTransaction per bill lifecycle event.
"""

from __future__ import annotations

from core.audit.functions import create_audit_transaction
from core.audit.models import (
    TRANSACTION_BILL_CREATED,
    TRANSACTION_BILL_DELETED,
    TRANSACTION_BILL_UPDATED,
)
from core.audit.store import AuditLog
from core.events.envelope import LedgerEvent
from core.events.registry import SubscriberRegistry
from engines.billing.events import (
    BILLING_BILL_CREATED_V1,
    BILLING_BILL_DELETED_V1,
    BILLING_BILL_UPDATED_V1,
)

AUDIT_SUBSCRIBER_ENGINE = "audit"

AUDIT_SUBSCRIPTIONS = {
    BILLING_BILL_CREATED_V1: TRANSACTION_BILL_CREATED,
    BILLING_BILL_UPDATED_V1: TRANSACTION_BILL_UPDATED,
    BILLING_BILL_DELETED_V1: TRANSACTION_BILL_DELETED,
}


class AuditSubscriptionHandler:
    def __init__(self, audit_log: AuditLog):
        self._audit_log = audit_log

    def __call__(self, event: LedgerEvent) -> None:
        payload = event.payload
        self._audit_log.append(create_audit_transaction(
            event_id=event.event_id,
            tenant_id=event.tenant_id,
            bill_id=payload.bill_id,
            transaction_type=AUDIT_SUBSCRIPTIONS[event.event_type],
            invoice_number=payload.invoice_number,
            occurred_at=event.occurred_at,
            metadata=payload.to_dict(),
        ))


def register_audit_subscriptions(registry: SubscriberRegistry, audit_log: AuditLog) -> AuditSubscriptionHandler:
    handler = AuditSubscriptionHandler(audit_log)
    for event_type in AUDIT_SUBSCRIPTIONS:
        registry.register_subscriber(
            event_type,
            handler,
            subscriber_engine=AUDIT_SUBSCRIBER_ENGINE,
            name=f"audit:{event_type}",
        )
    return handler
