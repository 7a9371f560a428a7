"""
Retail Ledger Event Bus - Public API
=====================================
The ledger write commits first. Side effects are heard afterwards.
"""

from core.events.envelope import EventPayload, LedgerEvent
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)
from core.events.outbox import (
    DEFAULT_MAX_ATTEMPTS,
    DeadLetter,
    DrainResult,
    SideEffectOutbox,
)
from core.events.registry import Subscription, SubscriberRegistry

__all__ = [
    "EventPayload",
    "LedgerEvent",
    "SubscriberRegistry",
    "Subscription",
    "SideEffectOutbox",
    "DeadLetter",
    "DrainResult",
    "DEFAULT_MAX_ATTEMPTS",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
    "SelfSubscriptionError",
]
