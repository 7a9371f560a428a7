"""
Retail Ledger HTTP API Auth - Provider and Principal Models
===========================================================
Deterministic API-key principal resolution. Each key belongs to
exactly one tenant.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Mapping, Protocol


def _canonical_uuid(value, *, field_name: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"{field_name} must be a valid UUID string.") from exc


@dataclass(frozen=True)
class AuthPrincipal:
    actor_id: str
    tenant_id: uuid.UUID
    actor_type: str = "HUMAN"

    def __post_init__(self):
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")
        if not self.actor_type or not isinstance(self.actor_type, str):
            raise ValueError("actor_type must be a non-empty string.")
        object.__setattr__(self, "tenant_id", _canonical_uuid(self.tenant_id, field_name="tenant_id"))


class AuthProvider(Protocol):
    def resolve_api_key(self, api_key: str) -> AuthPrincipal | None:
        ...


class InMemoryAuthProvider:
    """Deterministic in-memory auth provider for tests and settings-driven keys."""

    def __init__(self, api_key_to_principal: Mapping[str, AuthPrincipal] | None = None):
        normalized: dict[str, AuthPrincipal] = {}
        for api_key, principal in dict(api_key_to_principal or {}).items():
            if not isinstance(api_key, str) or not api_key.strip():
                raise ValueError("API key must be a non-empty string.")
            if not isinstance(principal, AuthPrincipal):
                raise ValueError("Principal must be AuthPrincipal.")
            normalized[api_key.strip()] = principal
        self._api_key_to_principal = normalized

    @classmethod
    def from_settings(cls, api_keys: Mapping[str, Mapping]) -> "InMemoryAuthProvider":
        """Build from {api_key: {"tenant_id": ..., "tenant_name": ..., "actor_id": ...}}."""
        return cls({
            key: AuthPrincipal(
                actor_id=str(entry.get("actor_id") or "api-key"),
                tenant_id=entry["tenant_id"],
                actor_type=str(entry.get("actor_type") or "HUMAN"),
            )
            for key, entry in dict(api_keys or {}).items()
        })

    def resolve_api_key(self, api_key: str) -> AuthPrincipal | None:
        if not isinstance(api_key, str):
            return None
        return self._api_key_to_principal.get(api_key)
