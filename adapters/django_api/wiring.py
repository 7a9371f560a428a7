"""
Retail Ledger Django Adapter Wiring
===================================
Constructs LedgerApiDependencies for live runs.

This module is adapter-only glue and the only place that reads
settings. Engines receive their collaborators through constructors.

LEDGER_STORAGE = "database"  Django ORM repositories, transaction.atomic
LEDGER_STORAGE = "memory"    in-memory repositories (smoke runs)
"""

from __future__ import annotations

import threading
import uuid
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Mapping

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from core.audit.store import AuditLog, InMemoryAuditLog
from core.audit.subscriptions import register_audit_subscriptions
from core.events.outbox import DEFAULT_MAX_ATTEMPTS, SideEffectOutbox
from core.events.registry import SubscriberRegistry
from core.http_api.auth import InMemoryAuthProvider
from core.http_api.dependencies import LedgerApiDependencies
from core.ledger_store.repository import (
    DbAuditLog,
    DbBillRepository,
    DbCatalog,
    DbCustomerDirectory,
    DbNotificationStore,
    DbSequenceProvider,
    DbTenantDirectory,
    unit_of_work,
)
from core.sequence.engine import InvoiceNumberGenerator
from core.sequence.provider import InMemorySequenceProvider, SequenceProvider
from core.time.clock import Clock, SystemClock
from engines.billing.models import TenantRecord
from engines.billing.repository import (
    BillRepository,
    CustomerDirectory,
    InMemoryBillRepository,
    InMemoryCustomerDirectory,
    InMemoryTenantDirectory,
)
from engines.billing.services import BillingService, LedgerStore
from engines.inventory.catalog import InMemoryCatalog
from engines.inventory.policies import LOW_STOCK_THRESHOLD
from engines.inventory.services import InventoryReconciler, ProductCatalogService
from engines.notifications.repository import InMemoryNotificationStore, NotificationStore
from engines.notifications.services import NotificationService
from engines.notifications.subscriptions import register_notification_subscriptions
from engines.reporting.services import ReportingAggregator


STORAGE_DATABASE = "database"
STORAGE_MEMORY = "memory"

DEV_API_KEY = "dev-ledger-key"
DEV_TENANT_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
DEV_TENANT_NAME = "Dev Store"
_DEV_ACTOR_ID = "live-ledger-user"

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: LedgerApiDependencies | None = None


def assemble_dependencies(
    *,
    bills: BillRepository,
    customers: CustomerDirectory,
    tenants,
    catalog,
    sequence_provider: SequenceProvider,
    notification_store: NotificationStore,
    audit_log: AuditLog,
    auth_provider,
    clock: Clock,
    timezone=None,
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    unit_of_work_factory: Callable[[], ContextManager] = nullcontext,
) -> LedgerApiDependencies:
    """Build the whole service graph over one set of storage backends."""
    registry = SubscriberRegistry()
    outbox = SideEffectOutbox(registry, max_attempts=max_attempts)

    notification_service = NotificationService(notification_store, clock)
    register_notification_subscriptions(registry, notification_service)
    register_audit_subscriptions(registry, audit_log)

    reconciler = InventoryReconciler(catalog, catalog, low_stock_threshold=low_stock_threshold)
    ledger_store = LedgerStore(bills, customers, reconciler)
    billing_service = BillingService(
        ledger_store=ledger_store,
        customers=customers,
        tenants=tenants,
        catalog=catalog,
        reconciler=reconciler,
        sequence=InvoiceNumberGenerator(sequence_provider, timezone=timezone),
        outbox=outbox,
        clock=clock,
        unit_of_work=unit_of_work_factory,
    )
    return LedgerApiDependencies(
        billing_service=billing_service,
        reporting=ReportingAggregator(ledger_store, catalog, clock, timezone=timezone),
        notification_service=notification_service,
        audit_log=audit_log,
        auth_provider=auth_provider,
        outbox=outbox,
        catalog_service=ProductCatalogService(
            catalog, outbox, clock, low_stock_threshold=low_stock_threshold,
        ),
    )


def _api_key_settings() -> dict[str, Mapping[str, Any]]:
    api_keys = dict(getattr(settings, "LEDGER_API_KEYS", {}) or {})
    if settings.DEBUG:
        api_keys.setdefault(DEV_API_KEY, {
            "tenant_id": str(DEV_TENANT_ID),
            "tenant_name": DEV_TENANT_NAME,
            "actor_id": _DEV_ACTOR_ID,
        })
    return api_keys


def _register_key_tenants(tenants, api_keys: Mapping[str, Mapping[str, Any]]) -> None:
    """Every key names its tenant; the name is the invoice number prefix."""
    for api_key, entry in api_keys.items():
        name = str(entry.get("tenant_name") or "").strip()
        if not name:
            raise ImproperlyConfigured(
                f"LEDGER_API_KEYS entry {api_key!r} is missing tenant_name."
            )
        tenants.add(TenantRecord(tenant_id=uuid.UUID(str(entry["tenant_id"])), name=name))


def _settings_kwargs(api_keys) -> dict[str, Any]:
    return {
        "auth_provider": InMemoryAuthProvider.from_settings(api_keys),
        "clock": SystemClock(),
        "timezone": getattr(settings, "LEDGER_TIME_ZONE", settings.TIME_ZONE),
        "low_stock_threshold": getattr(settings, "LEDGER_LOW_STOCK_THRESHOLD", LOW_STOCK_THRESHOLD),
        "max_attempts": getattr(settings, "LEDGER_SIDE_EFFECT_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
    }


def build_in_memory_dependencies() -> LedgerApiDependencies:
    api_keys = _api_key_settings()
    tenants = InMemoryTenantDirectory()
    _register_key_tenants(tenants, api_keys)
    return assemble_dependencies(
        bills=InMemoryBillRepository(),
        customers=InMemoryCustomerDirectory(),
        tenants=tenants,
        catalog=InMemoryCatalog(),
        sequence_provider=InMemorySequenceProvider(),
        notification_store=InMemoryNotificationStore(),
        audit_log=InMemoryAuditLog(),
        **_settings_kwargs(api_keys),
    )


def build_database_dependencies() -> LedgerApiDependencies:
    api_keys = _api_key_settings()
    tenants = DbTenantDirectory()
    _register_key_tenants(tenants, api_keys)
    return assemble_dependencies(
        bills=DbBillRepository(),
        customers=DbCustomerDirectory(),
        tenants=tenants,
        catalog=DbCatalog(),
        sequence_provider=DbSequenceProvider(),
        notification_store=DbNotificationStore(),
        audit_log=DbAuditLog(),
        unit_of_work_factory=unit_of_work,
        **_settings_kwargs(api_keys),
    )


def _create_dependencies() -> LedgerApiDependencies:
    storage = getattr(settings, "LEDGER_STORAGE", STORAGE_DATABASE)
    if storage == STORAGE_MEMORY:
        return build_in_memory_dependencies()
    if storage == STORAGE_DATABASE:
        return build_database_dependencies()
    raise ValueError(f"LEDGER_STORAGE must be '{STORAGE_DATABASE}' or '{STORAGE_MEMORY}'.")


def build_dependencies() -> LedgerApiDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def reset_dependencies() -> None:
    """Drop the cached graph so the next request rebuilds it from settings."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = None
