"""
Retail Ledger HTTP API Auth - Public API
=========================================
"""

from core.http_api.auth.provider import (
    AuthPrincipal,
    AuthProvider,
    InMemoryAuthProvider,
)
from core.http_api.auth.resolver import (
    TenantContext,
    resolve_auth_principal,
    resolve_tenant_context,
)

__all__ = [
    "AuthPrincipal",
    "AuthProvider",
    "InMemoryAuthProvider",
    "TenantContext",
    "resolve_auth_principal",
    "resolve_tenant_context",
]
