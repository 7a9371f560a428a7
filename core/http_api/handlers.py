"""
Retail Ledger HTTP API - Framework-Agnostic Handlers
=====================================================
Pure handler functions over raw JSON bodies / query dicts and injected
dependencies. Every handler returns the {"ok": ..., ...} envelope;
the adapter maps the error code to an HTTP status.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from core.commands.rejection import RejectionReason
from core.http_api.auth.resolver import TenantContext, resolve_tenant_context
from core.http_api.contracts import (
    BillIdRequest,
    NotificationIdRequest,
    NotificationTypeReadRequest,
    SalesReportReadRequest,
    parse_bill_create_body,
    parse_bill_update_body,
    parse_customer_create_body,
    parse_page_query,
    parse_uuid,
)
from core.http_api.errors import (
    HANDLER_EXECUTION_FAILED,
    INVALID_REQUEST,
    error_response,
    ledger_error_response,
    rejection_response,
    success_response,
)
from engines.billing.errors import LedgerError
from engines.reporting.policies import WINDOW_ALL

logger = logging.getLogger("ledger.http")


def _run(
    call: Callable[[TenantContext], Any],
    dependencies,
    headers: Optional[dict[str, Any]],
) -> dict[str, Any]:
    context = resolve_tenant_context(headers, dependencies.auth_provider)
    if isinstance(context, RejectionReason):
        return rejection_response(context)
    try:
        data = call(context)
    except LedgerError as exc:
        return ledger_error_response(exc)
    except ValueError as exc:
        return error_response(code=INVALID_REQUEST, message=str(exc), details={})
    except Exception as exc:
        logger.error(f"Handler failed for tenant {context.tenant_id}: {exc}", exc_info=True)
        return error_response(
            code=HANDLER_EXECUTION_FAILED,
            message="Failed to execute ledger request.",
            details={"error_type": type(exc).__name__},
        )
    return success_response(data)


def _bill_id(raw) -> BillIdRequest:
    return BillIdRequest(bill_id=parse_uuid(raw, field_name="id"))


# ══════════════════════════════════════════════════════════════
# BILLS
# ══════════════════════════════════════════════════════════════

def post_bill_create(body: Any, dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = parse_bill_create_body(body)
        bill = dependencies.billing_service.create_bill(tenant_id=ctx.tenant_id, request=request)
        return bill.to_dict()

    return _run(call, dependencies, headers)


def get_bills(query: Optional[dict], dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        paging = parse_page_query(query)
        page = dependencies.billing_service.list_bills(
            tenant_id=ctx.tenant_id, page=paging.page, limit=paging.limit,
        )
        return page.to_dict()

    return _run(call, dependencies, headers)


def get_bill(bill_id: Any, dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = _bill_id(bill_id)
        return dependencies.billing_service.get_bill(
            tenant_id=ctx.tenant_id, bill_id=request.bill_id,
        ).to_dict()

    return _run(call, dependencies, headers)


def patch_bill(bill_id: Any, body: Any, dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = _bill_id(bill_id)
        patch = parse_bill_update_body(body)
        return dependencies.billing_service.update_bill(
            tenant_id=ctx.tenant_id, bill_id=request.bill_id, request=patch,
        ).to_dict()

    return _run(call, dependencies, headers)


def delete_bill(bill_id: Any, dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = _bill_id(bill_id)
        bill = dependencies.billing_service.delete_bill(
            tenant_id=ctx.tenant_id, bill_id=request.bill_id,
        )
        return {"id": str(bill.bill_id), "invoiceNumber": bill.invoice_number, "deleted": True}

    return _run(call, dependencies, headers)


def get_sales_report(query: Optional[dict], dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = SalesReportReadRequest(window=(query or {}).get("window") or WINDOW_ALL)
        return dependencies.reporting.report(tenant_id=ctx.tenant_id, window=request.window).to_dict()

    return _run(call, dependencies, headers)


def get_dashboard_totals(dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    return _run(
        lambda ctx: dependencies.reporting.dashboard_totals(tenant_id=ctx.tenant_id),
        dependencies,
        headers,
    )


def get_bill_count(dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    return _run(
        lambda ctx: {"totalBills": dependencies.reporting.bill_count(tenant_id=ctx.tenant_id)},
        dependencies,
        headers,
    )


# ══════════════════════════════════════════════════════════════
# CUSTOMERS
# ══════════════════════════════════════════════════════════════

def post_customer_create(body: Any, dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = parse_customer_create_body(body)
        return dependencies.billing_service.create_customer(
            tenant_id=ctx.tenant_id, request=request,
        ).to_dict()

    return _run(call, dependencies, headers)


def get_customers(dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    return _run(
        lambda ctx: [c.to_dict() for c in dependencies.billing_service.list_customers(tenant_id=ctx.tenant_id)],
        dependencies,
        headers,
    )


# ══════════════════════════════════════════════════════════════
# NOTIFICATIONS
# ══════════════════════════════════════════════════════════════

def get_notifications(query: Optional[dict], dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        paging = parse_page_query(query)
        return dependencies.notification_service.list_notifications(
            tenant_id=ctx.tenant_id, page=paging.page, limit=paging.limit,
        )

    return _run(call, dependencies, headers)


def get_notifications_by_type(
    notification_type: str,
    query: Optional[dict],
    dependencies,
    headers: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = NotificationTypeReadRequest(
            notification_type=notification_type, page=parse_page_query(query),
        )
        return dependencies.notification_service.list_by_type(
            tenant_id=ctx.tenant_id,
            notification_type=request.notification_type,
            page=request.page.page,
            limit=request.page.limit,
        )

    return _run(call, dependencies, headers)


def get_unread_notification_count(dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    return _run(
        lambda ctx: {"unreadCount": dependencies.notification_service.unread_count(tenant_id=ctx.tenant_id)},
        dependencies,
        headers,
    )


def patch_notification_read(
    notification_id: Any, dependencies, headers: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = NotificationIdRequest(notification_id=parse_uuid(notification_id, field_name="id"))
        return dependencies.notification_service.mark_read(
            tenant_id=ctx.tenant_id, notification_id=request.notification_id,
        ).to_dict()

    return _run(call, dependencies, headers)


def patch_notifications_read_all(dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        updated = dependencies.notification_service.mark_all_read(tenant_id=ctx.tenant_id)
        return {"success": True, "updated": updated}

    return _run(call, dependencies, headers)


def delete_notification(
    notification_id: Any, dependencies, headers: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = NotificationIdRequest(notification_id=parse_uuid(notification_id, field_name="id"))
        dependencies.notification_service.delete(
            tenant_id=ctx.tenant_id, notification_id=request.notification_id,
        )
        return {"success": True}

    return _run(call, dependencies, headers)


def delete_all_notifications(dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        deleted = dependencies.notification_service.delete_all(tenant_id=ctx.tenant_id)
        return {"success": True, "deleted": deleted}

    return _run(call, dependencies, headers)


# ══════════════════════════════════════════════════════════════
# AUDIT TRANSACTIONS
# ══════════════════════════════════════════════════════════════

def get_transactions(dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    return _run(
        lambda ctx: [t.to_dict() for t in dependencies.audit_log.list_for_tenant(tenant_id=ctx.tenant_id)],
        dependencies,
        headers,
    )


def get_bill_transactions(bill_id: Any, dependencies, headers: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    def call(ctx: TenantContext):
        request = _bill_id(bill_id)
        return [
            t.to_dict()
            for t in dependencies.audit_log.list_for_bill(tenant_id=ctx.tenant_id, bill_id=request.bill_id)
        ]

    return _run(call, dependencies, headers)
