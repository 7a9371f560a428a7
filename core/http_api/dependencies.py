"""
Retail Ledger HTTP API - Dependencies
======================================
Injected services for handler wiring.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.audit.store import AuditLog
from core.events.outbox import SideEffectOutbox
from core.http_api.auth.provider import AuthProvider
from engines.billing.services import BillingService
from engines.inventory.services import ProductCatalogService
from engines.notifications.services import NotificationService
from engines.reporting.services import ReportingAggregator


@dataclass(frozen=True)
class LedgerApiDependencies:
    billing_service: BillingService
    reporting: ReportingAggregator
    notification_service: NotificationService
    audit_log: AuditLog
    auth_provider: AuthProvider
    outbox: SideEffectOutbox
    # No HTTP route; the product catalog owner calls this in-process.
    catalog_service: ProductCatalogService
