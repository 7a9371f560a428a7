"""
Retail Ledger Django HTTP adapter.
Thin framework glue over core/http_api handlers.
"""

from adapters.django_api.wiring import (
    DEV_API_KEY,
    DEV_TENANT_ID,
    DEV_TENANT_NAME,
    assemble_dependencies,
    build_dependencies,
)

__all__ = [
    "DEV_API_KEY",
    "DEV_TENANT_ID",
    "DEV_TENANT_NAME",
    "assemble_dependencies",
    "build_dependencies",
]
