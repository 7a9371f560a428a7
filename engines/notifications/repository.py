"""
Retail Ledger Notifications Engine - Storage
=============================================
NotificationStore protocol + InMemory implementation.
Notifications are never rewritten apart from the read flag.
"""

from __future__ import annotations

import threading
import uuid
from typing import Optional, Protocol

from engines.billing.models import Page
from engines.notifications.models import Notification


class NotificationStore(Protocol):
    def add(self, notification: Notification) -> Notification: ...

    def page_for_tenant(
        self,
        *,
        tenant_id: uuid.UUID,
        page: int,
        limit: int,
        notification_type: Optional[str] = None,
    ) -> Page: ...

    def unread_count(self, *, tenant_id: uuid.UUID) -> int: ...

    def mark_read(self, *, tenant_id: uuid.UUID, notification_id: uuid.UUID) -> Optional[Notification]: ...

    def mark_all_read(self, *, tenant_id: uuid.UUID) -> int: ...

    def delete(self, *, tenant_id: uuid.UUID, notification_id: uuid.UUID) -> bool: ...

    def delete_all(self, *, tenant_id: uuid.UUID) -> int: ...


class InMemoryNotificationStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._items: dict[uuid.UUID, Notification] = {}
        self._order: dict[uuid.UUID, int] = {}
        self._seq = 0

    def add(self, notification: Notification) -> Notification:
        with self._lock:
            self._seq += 1
            self._items[notification.notification_id] = notification
            self._order[notification.notification_id] = self._seq
        return notification

    def _for_tenant(self, tenant_id: uuid.UUID, notification_type: Optional[str] = None) -> list[Notification]:
        with self._lock:
            selected = [
                n for n in self._items.values()
                if n.tenant_id == tenant_id
                and (notification_type is None or n.notification_type == notification_type)
            ]
            order = dict(self._order)
        return sorted(
            selected,
            key=lambda n: (n.created_at, order[n.notification_id]),
            reverse=True,
        )

    def page_for_tenant(
        self,
        *,
        tenant_id: uuid.UUID,
        page: int,
        limit: int,
        notification_type: Optional[str] = None,
    ) -> Page:
        selected = self._for_tenant(tenant_id, notification_type)
        offset = (page - 1) * limit
        return Page(
            items=tuple(selected[offset:offset + limit]),
            total=len(selected),
            page=page,
            limit=limit,
        )

    def unread_count(self, *, tenant_id: uuid.UUID) -> int:
        with self._lock:
            return sum(1 for n in self._items.values() if n.tenant_id == tenant_id and not n.read)

    def mark_read(self, *, tenant_id: uuid.UUID, notification_id: uuid.UUID) -> Optional[Notification]:
        with self._lock:
            current = self._items.get(notification_id)
            if current is None or current.tenant_id != tenant_id:
                return None
            updated = current.mark_read()
            self._items[notification_id] = updated
            return updated

    def mark_all_read(self, *, tenant_id: uuid.UUID) -> int:
        changed = 0
        with self._lock:
            for nid, n in list(self._items.items()):
                if n.tenant_id == tenant_id and not n.read:
                    self._items[nid] = n.mark_read()
                    changed += 1
        return changed

    def delete(self, *, tenant_id: uuid.UUID, notification_id: uuid.UUID) -> bool:
        with self._lock:
            current = self._items.get(notification_id)
            if current is None or current.tenant_id != tenant_id:
                return False
            del self._items[notification_id]
            del self._order[notification_id]
            return True

    def delete_all(self, *, tenant_id: uuid.UUID) -> int:
        with self._lock:
            doomed = [nid for nid, n in self._items.items() if n.tenant_id == tenant_id]
            for nid in doomed:
                del self._items[nid]
                del self._order[nid]
        return len(doomed)
