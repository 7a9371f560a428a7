"""
Retail Ledger HTTP API - Public API
===================================
"""

from core.http_api.contracts import (
    BillIdRequest,
    HttpApiErrorBody,
    HttpApiResponse,
    NotificationIdRequest,
    NotificationTypeReadRequest,
    PageReadRequest,
    SalesReportReadRequest,
)
from core.http_api.dependencies import LedgerApiDependencies
from core.http_api.errors import (
    error_response,
    http_status_for,
    ledger_error_response,
    rejection_response,
    success_response,
)

__all__ = [
    "BillIdRequest",
    "HttpApiErrorBody",
    "HttpApiResponse",
    "LedgerApiDependencies",
    "NotificationIdRequest",
    "NotificationTypeReadRequest",
    "PageReadRequest",
    "SalesReportReadRequest",
    "error_response",
    "http_status_for",
    "ledger_error_response",
    "rejection_response",
    "success_response",
]
