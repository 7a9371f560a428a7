"""
Retail Ledger Event Bus - Errors
=================================
Raised at wiring time only. Delivery failures are never raised:
the outbox retries them and parks them as dead letters.
"""


class EventBusError(Exception):
    """Base error for side-effect routing."""
    pass


class InvalidEventTypeFormat(EventBusError):
    """Event type is not engine.domain.action[.vN]."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"Event type '{event_type}' must look like "
            f"'engine.domain.action' (e.g. 'billing.bill.created.v1')."
        )


class DuplicateSubscriberError(EventBusError):
    """Same subscriber name already bound to this event type."""

    def __init__(self, event_type: str, subscriber_name: str):
        self.event_type = event_type
        self.subscriber_name = subscriber_name
        super().__init__(
            f"Subscriber '{subscriber_name}' is already bound "
            f"to '{event_type}'."
        )


class SelfSubscriptionError(EventBusError):
    """An engine tried to react to its own events."""

    def __init__(self, engine: str, event_type: str):
        self.engine = engine
        self.event_type = event_type
        super().__init__(
            f"Engine '{engine}' may not subscribe to its own "
            f"event type '{event_type}'."
        )
