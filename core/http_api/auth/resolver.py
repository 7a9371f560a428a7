"""
Retail Ledger HTTP API Auth - Context Resolvers
================================================
Resolve the calling tenant from request headers.
The tenant always comes from the API key, never from the body.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from core.commands.rejection import ReasonCode, RejectionReason
from core.http_api.auth.provider import AuthPrincipal

HEADER_API_KEY = "x-api-key"
HEADER_TENANT_ID = "x-tenant-id"


@dataclass(frozen=True)
class TenantContext:
    tenant_id: uuid.UUID
    actor_id: str
    actor_type: str


def _normalize_headers(headers: dict[str, Any] | None) -> dict[str, str]:
    normalized: dict[str, str] = {}
    for key, value in (headers or {}).items():
        normalized[str(key).strip().lower().replace("_", "-")] = str(value).strip()
    return normalized


def _reject(code: str, message: str) -> RejectionReason:
    return RejectionReason(
        code=code,
        message=message,
        policy_name="http_api_auth_resolver",
    )


def resolve_auth_principal(
    headers: dict[str, Any] | None,
    provider,
) -> AuthPrincipal | RejectionReason:
    normalized_headers = _normalize_headers(headers)
    api_key = normalized_headers.get(HEADER_API_KEY)
    if not api_key:
        return _reject(
            ReasonCode.ACTOR_REQUIRED_MISSING,
            "Missing required header X-API-KEY.",
        )

    principal = provider.resolve_api_key(api_key)
    if principal is None:
        return _reject(ReasonCode.ACTOR_INVALID, "Invalid API key.")
    return principal


def resolve_tenant_context(
    headers: dict[str, Any] | None,
    provider,
) -> TenantContext | RejectionReason:
    """
    X-TENANT-ID is optional. When present it must name the key's tenant.
    """
    principal = resolve_auth_principal(headers, provider)
    if isinstance(principal, RejectionReason):
        return principal

    declared = _normalize_headers(headers).get(HEADER_TENANT_ID)
    if declared:
        try:
            declared_id = uuid.UUID(declared)
        except ValueError:
            return _reject(ReasonCode.INVALID_CONTEXT, "X-TENANT-ID must be a valid UUID.")
        if declared_id != principal.tenant_id:
            return _reject(
                ReasonCode.INVALID_CONTEXT,
                "Header X-TENANT-ID does not match the API key's tenant.",
            )

    return TenantContext(
        tenant_id=principal.tenant_id,
        actor_id=principal.actor_id,
        actor_type=principal.actor_type,
    )
