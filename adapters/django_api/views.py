"""
Retail Ledger Django Adapter Views
=================================
Pass-through HTTP views over core/http_api handlers.
"""

from __future__ import annotations

import json
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies
from core.http_api import handlers
from core.http_api.errors import error_response, http_status_for


def _headers_from_request(request: HttpRequest) -> dict[str, str]:
    return {str(key): str(value) for key, value in request.headers.items()}


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _respond(payload: dict[str, Any]) -> JsonResponse:
    return JsonResponse(payload, status=http_status_for(payload))


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


def _dispatch_body(handler, request: HttpRequest, *args) -> JsonResponse:
    try:
        body = _parse_json_body(request)
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(handler(*args, body, build_dependencies(), headers=_headers_from_request(request)))


def _dispatch_query(handler, request: HttpRequest, *args) -> JsonResponse:
    return _respond(
        handler(*args, request.GET.dict(), build_dependencies(), headers=_headers_from_request(request))
    )


def _dispatch(handler, request: HttpRequest, *args) -> JsonResponse:
    return _respond(handler(*args, build_dependencies(), headers=_headers_from_request(request)))


# ══════════════════════════════════════════════════════════════
# BILLS
# ══════════════════════════════════════════════════════════════

@csrf_exempt
def bills_view(request: HttpRequest) -> JsonResponse:
    if request.method == "GET":
        return _dispatch_query(handlers.get_bills, request)
    if request.method == "POST":
        return _dispatch_body(handlers.post_bill_create, request)
    return _method_not_allowed()


@csrf_exempt
def bill_detail_view(request: HttpRequest, bill_id: str) -> JsonResponse:
    if request.method == "GET":
        return _dispatch(handlers.get_bill, request, bill_id)
    if request.method == "PATCH":
        return _dispatch_body(handlers.patch_bill, request, bill_id)
    if request.method == "DELETE":
        return _dispatch(handlers.delete_bill, request, bill_id)
    return _method_not_allowed()


@csrf_exempt
def customers_view(request: HttpRequest) -> JsonResponse:
    if request.method == "GET":
        return _dispatch(handlers.get_customers, request)
    if request.method == "POST":
        return _dispatch_body(handlers.post_customer_create, request)
    return _method_not_allowed()


@csrf_exempt
def sales_report_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_query(handlers.get_sales_report, request)


@csrf_exempt
def dashboard_totals_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(handlers.get_dashboard_totals, request)


@csrf_exempt
def bill_count_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(handlers.get_bill_count, request)


# ══════════════════════════════════════════════════════════════
# NOTIFICATIONS
# ══════════════════════════════════════════════════════════════

@csrf_exempt
def notifications_view(request: HttpRequest) -> JsonResponse:
    if request.method == "GET":
        return _dispatch_query(handlers.get_notifications, request)
    if request.method == "DELETE":
        return _dispatch(handlers.delete_all_notifications, request)
    return _method_not_allowed()


@csrf_exempt
def notifications_unread_count_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(handlers.get_unread_notification_count, request)


@csrf_exempt
def notifications_by_type_view(request: HttpRequest, notification_type: str) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_query(handlers.get_notifications_by_type, request, notification_type)


@csrf_exempt
def notifications_read_all_view(request: HttpRequest) -> JsonResponse:
    if request.method != "PATCH":
        return _method_not_allowed()
    return _dispatch(handlers.patch_notifications_read_all, request)


@csrf_exempt
def notification_read_view(request: HttpRequest, notification_id: str) -> JsonResponse:
    if request.method != "PATCH":
        return _method_not_allowed()
    return _dispatch(handlers.patch_notification_read, request, notification_id)


@csrf_exempt
def notification_detail_view(request: HttpRequest, notification_id: str) -> JsonResponse:
    if request.method != "DELETE":
        return _method_not_allowed()
    return _dispatch(handlers.delete_notification, request, notification_id)


# ══════════════════════════════════════════════════════════════
# AUDIT TRANSACTIONS
# ══════════════════════════════════════════════════════════════

@csrf_exempt
def transactions_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(handlers.get_transactions, request)


@csrf_exempt
def bill_transactions_view(request: HttpRequest, bill_id: str) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(handlers.get_bill_transactions, request, bill_id)
