"""
Retail Ledger Event Bus - Subscriber Registry
==============================================
Decides which side-effect subscribers receive which ledger events.

Rules:
- Event types follow engine.domain.action[.vN]
- Many subscribers per event type, each bound once by name
- An engine does not subscribe to its own events unless explicitly allowed
- In-memory, thread-safe, populated once at wiring time
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)

logger = logging.getLogger("ledger.events")


@dataclass(frozen=True)
class Subscription:
    event_type: str
    handler: Callable
    subscriber_engine: str
    name: str


class SubscriberRegistry:
    """In-memory map of event_type -> ordered subscriptions."""

    def __init__(self):
        self._subscriptions: dict[str, list[Subscription]] = {}
        self._lock = Lock()

    @staticmethod
    def _validate_event_type_format(event_type: str) -> None:
        if not event_type or not isinstance(event_type, str):
            raise InvalidEventTypeFormat(event_type or "")
        parts = event_type.strip().split(".")
        if len(parts) < 3 or any(not part for part in parts):
            raise InvalidEventTypeFormat(event_type)

    @staticmethod
    def source_engine(event_type: str) -> str:
        return event_type.split(".")[0]

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_engine: str,
        name: str | None = None,
        allow_self_subscription: bool = False,
    ) -> Subscription:
        """
        Bind `handler` to `event_type`.

        Raises:
            InvalidEventTypeFormat:   bad event type
            DuplicateSubscriberError: same name already bound to the type
            SelfSubscriptionError:    engine subscribing to its own events
        """
        self._validate_event_type_format(event_type)

        if not callable(handler):
            raise EventBusError(f"Handler must be callable, got {type(handler)}.")

        if self.source_engine(event_type) == subscriber_engine and not allow_self_subscription:
            raise SelfSubscriptionError(subscriber_engine, event_type)

        subscription = Subscription(
            event_type=event_type,
            handler=handler,
            subscriber_engine=subscriber_engine,
            name=name or f"{subscriber_engine}:{getattr(handler, '__qualname__', handler)}",
        )

        with self._lock:
            bound = self._subscriptions.setdefault(event_type, [])
            for existing in bound:
                if existing.name == subscription.name or existing.handler is handler:
                    raise DuplicateSubscriberError(event_type, subscription.name)
            bound.append(subscription)

        logger.debug(f"Subscriber registered: {subscription.name} -> {event_type}")
        return subscription

    def get_subscribers(self, event_type: str) -> list[Subscription]:
        """Empty list when nothing listens (not an error)."""
        with self._lock:
            return list(self._subscriptions.get(event_type, []))

    def has_subscribers(self, event_type: str) -> bool:
        with self._lock:
            return bool(self._subscriptions.get(event_type))

    def get_all_event_types(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._subscriptions.keys())

    def subscriber_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(event_type, []))
