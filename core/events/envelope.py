"""
Retail Ledger Event Bus - Event Envelope
=========================================
Every side effect is triggered by a LedgerEvent. The payload is one
of the typed payload dataclasses declared by the engines; each payload
class carries its own EVENT_TYPE and NOTIFICATION_TYPE.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol


class EventPayload(Protocol):
    EVENT_TYPE: str
    NOTIFICATION_TYPE: str

    def to_dict(self) -> dict: ...


@dataclass(frozen=True)
class LedgerEvent:
    event_type: str
    tenant_id: uuid.UUID
    occurred_at: datetime
    payload: Any
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        if not isinstance(self.tenant_id, uuid.UUID):
            raise ValueError("tenant_id must be UUID.")
        if self.occurred_at.tzinfo is None:
            raise ValueError("occurred_at must be timezone-aware.")
        declared = getattr(self.payload, "EVENT_TYPE", None)
        if declared is not None and declared != self.event_type:
            raise ValueError(
                f"payload {type(self.payload).__name__} belongs to "
                f"'{declared}', not '{self.event_type}'."
            )

    @classmethod
    def for_payload(cls, payload, *, tenant_id: uuid.UUID, occurred_at: datetime) -> "LedgerEvent":
        return cls(
            event_type=payload.EVENT_TYPE,
            tenant_id=tenant_id,
            occurred_at=occurred_at,
            payload=payload,
        )

    @property
    def notification_type(self) -> str:
        return self.payload.NOTIFICATION_TYPE

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "tenant_id": str(self.tenant_id),
            "occurred_at": self.occurred_at.isoformat(),
            "payload": self.payload.to_dict(),
        }
