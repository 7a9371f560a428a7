"""
Retail Ledger Command Layer - Rejection Model
==============================================
Structured rejection reasons for requests denied before they reach
an engine (missing credentials, unknown API key, bad tenant context).

Every rejection is:
- Deterministic (same input gives the same rejection)
- Machine-readable (code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Fields:
        code:        Machine-readable code (e.g. 'ACTOR_INVALID').
        message:     Human-readable explanation.
        policy_name: Name of the check that rejected the request.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """Convention: SCREAMING_SNAKE_CASE."""

    # ── Actor ─────────────────────────────────────────────────
    ACTOR_REQUIRED_MISSING = "ACTOR_REQUIRED_MISSING"
    ACTOR_INVALID = "ACTOR_INVALID"

    # ── Tenant context ────────────────────────────────────────
    INVALID_CONTEXT = "INVALID_CONTEXT"
    TENANT_UNKNOWN = "TENANT_UNKNOWN"
