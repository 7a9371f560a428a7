"""Retail Ledger Notifications Engine - application service."""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from core.time.clock import Clock
from engines.billing.errors import NotFoundError, ValidationError
from engines.billing.policies import clamp_limit, clamp_page
from engines.notifications.models import VALID_NOTIFICATION_TYPES, Notification
from engines.notifications.repository import NotificationStore

logger = logging.getLogger("ledger.events")


class NotificationService:
    def __init__(
        self,
        store: NotificationStore,
        clock: Clock,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ):
        self._store = store
        self._clock = clock
        self._id_factory = id_factory

    def create_notification(
        self,
        *,
        tenant_id: uuid.UUID,
        notification_type: str,
        title: str,
        message: str,
        data: Optional[dict] = None,
        event_id: Optional[uuid.UUID] = None,
        created_at=None,
    ) -> Notification:
        return self._store.add(Notification(
            notification_id=self._id_factory(),
            tenant_id=tenant_id,
            notification_type=notification_type,
            title=title,
            message=message,
            data=data or {},
            created_at=created_at or self._clock.now_utc(),
            event_id=event_id,
        ))

    def list_notifications(self, *, tenant_id: uuid.UUID, page=None, limit=None) -> dict:
        result = self._store.page_for_tenant(
            tenant_id=tenant_id, page=clamp_page(page), limit=clamp_limit(limit),
        )
        body = result.to_dict()
        body["unreadCount"] = self._store.unread_count(tenant_id=tenant_id)
        return body

    def list_by_type(self, *, tenant_id: uuid.UUID, notification_type: str, page=None, limit=None) -> dict:
        if notification_type not in VALID_NOTIFICATION_TYPES:
            raise ValidationError(
                f"Unknown notification type '{notification_type}'.", field="type",
            )
        result = self._store.page_for_tenant(
            tenant_id=tenant_id,
            page=clamp_page(page),
            limit=clamp_limit(limit),
            notification_type=notification_type,
        )
        return result.to_dict()

    def unread_count(self, *, tenant_id: uuid.UUID) -> int:
        return self._store.unread_count(tenant_id=tenant_id)

    def mark_read(self, *, tenant_id: uuid.UUID, notification_id: uuid.UUID) -> Notification:
        updated = self._store.mark_read(tenant_id=tenant_id, notification_id=notification_id)
        if updated is None:
            raise NotFoundError("Notification", notification_id)
        return updated

    def mark_all_read(self, *, tenant_id: uuid.UUID) -> int:
        changed = self._store.mark_all_read(tenant_id=tenant_id)
        logger.debug(f"Marked {changed} notifications read for tenant {tenant_id}")
        return changed

    def delete(self, *, tenant_id: uuid.UUID, notification_id: uuid.UUID) -> None:
        if not self._store.delete(tenant_id=tenant_id, notification_id=notification_id):
            raise NotFoundError("Notification", notification_id)

    def delete_all(self, *, tenant_id: uuid.UUID) -> int:
        return self._store.delete_all(tenant_id=tenant_id)
