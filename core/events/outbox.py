"""
Retail Ledger Event Bus - Side-Effect Outbox
=============================================
Queues ledger events for their subscribers (notifications, audit)
and delivers them after the triggering write has committed.

Delivery behavior:
1. publish() enqueues one delivery per subscriber of the event type
2. drain() runs pending deliveries in FIFO order
3. A failing delivery is retried up to max_attempts times
4. After the last attempt it is parked in dead_letters
5. retry_dead_letters() moves parked deliveries back to the queue

Retries are per subscriber: a notification that was written is never
re-sent because the audit subscriber failed on the same event.

This module NEVER raises from publish/drain/emit. A broken side
effect must not fail or roll back the ledger write that caused it.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field

from core.events.envelope import LedgerEvent
from core.events.registry import Subscription, SubscriberRegistry

logger = logging.getLogger("ledger.events")

DEFAULT_MAX_ATTEMPTS = 3


@dataclass
class Delivery:
    event: LedgerEvent
    subscription: Subscription
    attempts: int = 0
    last_error: str | None = None
    last_error_type: str | None = None


@dataclass(frozen=True)
class DeadLetter:
    event: LedgerEvent
    subscriber: str
    attempts: int
    error: str
    error_type: str

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event.event_id),
            "event_type": self.event.event_type,
            "subscriber": self.subscriber,
            "attempts": self.attempts,
            "error": self.error,
            "error_type": self.error_type,
        }


@dataclass
class DrainResult:
    delivered: int = 0
    retried: int = 0
    dead_lettered: int = 0
    failures: list = field(default_factory=list)

    def merge(self, other: "DrainResult") -> "DrainResult":
        self.delivered += other.delivered
        self.retried += other.retried
        self.dead_lettered += other.dead_lettered
        self.failures.extend(other.failures)
        return self


class SideEffectOutbox:
    """In-process outbound queue with per-subscriber retry and dead letters."""

    def __init__(self, registry: SubscriberRegistry, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        if not isinstance(max_attempts, int) or max_attempts < 1:
            raise ValueError("max_attempts must be integer >= 1.")
        self._registry = registry
        self._max_attempts = max_attempts
        self._pending: deque[Delivery] = deque()
        self._dead: list[DeadLetter] = []
        self._lock = threading.Lock()

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def dead_letters(self) -> tuple[DeadLetter, ...]:
        with self._lock:
            return tuple(self._dead)

    # ── enqueue ──────────────────────────────────────────────

    def publish(self, event: LedgerEvent) -> int:
        """Enqueue one delivery per subscriber. Returns deliveries queued."""
        try:
            subscriptions = self._registry.get_subscribers(event.event_type)
        except Exception as exc:
            logger.error(f"Could not route {getattr(event, 'event_type', event)}: {exc}", exc_info=True)
            return 0

        if not subscriptions:
            logger.debug(f"No subscribers for '{event.event_type}' (event_id: {event.event_id})")
            return 0

        with self._lock:
            for subscription in subscriptions:
                self._pending.append(Delivery(event=event, subscription=subscription))
        return len(subscriptions)

    # ── deliver ──────────────────────────────────────────────

    def _next(self) -> Delivery | None:
        with self._lock:
            return self._pending.popleft() if self._pending else None

    def _deliver(self, delivery: Delivery, result: DrainResult) -> None:
        event = delivery.event
        name = delivery.subscription.name
        while delivery.attempts < self._max_attempts:
            delivery.attempts += 1
            try:
                delivery.subscription.handler(event)
            except Exception as exc:
                delivery.last_error = str(exc)
                delivery.last_error_type = type(exc).__name__
                if delivery.attempts < self._max_attempts:
                    result.retried += 1
                    logger.warning(
                        f"Side effect {name} failed for {event.event_type} "
                        f"(event_id: {event.event_id}, attempt {delivery.attempts}/"
                        f"{self._max_attempts}): {exc}"
                    )
                    continue
                logger.error(
                    f"Side effect {name} dead-lettered for {event.event_type} "
                    f"(event_id: {event.event_id}) after {delivery.attempts} attempts: {exc}",
                    exc_info=True,
                )
                dead = DeadLetter(
                    event=event,
                    subscriber=name,
                    attempts=delivery.attempts,
                    error=delivery.last_error,
                    error_type=delivery.last_error_type,
                )
                with self._lock:
                    self._dead.append(dead)
                result.dead_lettered += 1
                result.failures.append(dead.to_dict())
                return
            result.delivered += 1
            logger.debug(f"Delivered {event.event_type} -> {name}")
            return

    def drain(self) -> DrainResult:
        """Run every pending delivery. Never raises."""
        result = DrainResult()
        while True:
            delivery = self._next()
            if delivery is None:
                break
            self._deliver(delivery, result)
        if result.dead_lettered:
            logger.info(
                f"Outbox drained: {result.delivered} delivered, "
                f"{result.dead_lettered} dead-lettered"
            )
        return result

    def emit(self, event: LedgerEvent) -> DrainResult:
        """publish() followed by drain()."""
        self.publish(event)
        return self.drain()

    def retry_dead_letters(self) -> DrainResult:
        """Give every parked delivery a fresh set of attempts."""
        with self._lock:
            parked, self._dead = self._dead, []
        for dead in parked:
            subscription = self._find_subscription(dead)
            if subscription is None:
                logger.warning(
                    f"Dropping dead letter for {dead.event.event_type}: "
                    f"subscriber {dead.subscriber} is no longer registered"
                )
                continue
            with self._lock:
                self._pending.append(Delivery(event=dead.event, subscription=subscription))
        return self.drain()

    def _find_subscription(self, dead: DeadLetter) -> Subscription | None:
        for subscription in self._registry.get_subscribers(dead.event.event_type):
            if subscription.name == dead.subscriber:
                return subscription
        return None
