"""
Retail Ledger HTTP API - Error Mapping
=======================================
Stable transport error mapping for rejections, ledger errors and
handler failures. Status codes are resolved by the adapter from the
error code via http_status_for().
"""

from __future__ import annotations

from typing import Any, Optional

from core.commands.rejection import RejectionReason
from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse
from engines.billing.errors import LedgerError

INVALID_REQUEST = "INVALID_REQUEST"
METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
HANDLER_EXECUTION_FAILED = "HANDLER_EXECUTION_FAILED"

STATUS_BY_ERROR_CODE = {
    "VALIDATION_ERROR": 400,
    INVALID_REQUEST: 400,
    "INVALID_CONTEXT": 400,
    "ACTOR_REQUIRED_MISSING": 401,
    "ACTOR_INVALID": 401,
    "NOT_FOUND": 404,
    "TENANT_UNKNOWN": 404,
    METHOD_NOT_ALLOWED: 405,
    "CONFLICT": 409,
    HANDLER_EXECUTION_FAILED: 500,
}


def http_status_for(body: dict[str, Any]) -> int:
    if body.get("ok"):
        return 200
    code = (body.get("error") or {}).get("code")
    return STATUS_BY_ERROR_CODE.get(code, 400)


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ),
    ).to_dict()


def success_response(data: Any) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data).to_dict()


def rejection_response(reason: RejectionReason) -> dict[str, Any]:
    return error_response(
        code=reason.code,
        message=reason.message,
        details={"policy_name": reason.policy_name},
    )


def ledger_error_response(exc: LedgerError) -> dict[str, Any]:
    details = exc.to_dict()
    details.pop("code", None)
    details.pop("message", None)
    return error_response(code=exc.code, message=exc.message, details=details)
