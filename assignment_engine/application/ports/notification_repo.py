"""Port interface for the notification inbox."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from assignment_engine.domain.entities.notification import Notification, NotificationFilter
from assignment_engine.domain.value_objects.enums import NotificationType


class NotificationRepository(ABC):
    @abstractmethod
    async def create(self, notification: Notification) -> Notification:
        """Persist a notification.

        For ASSIGNED notifications an existing row for the same
        (user_id, work_order_id) is returned instead of a duplicate.
        """
        ...

    @abstractmethod
    async def find_assigned(self, user_id: str, work_order_id: str) -> Notification | None:
        ...

    @abstractmethod
    async def get_by_id(self, notification_id: int) -> Notification | None:
        ...

    @abstractmethod
    async def find_many(self, notification_filter: NotificationFilter) -> tuple[list[Notification], int]:
        """Return one page, newest first, plus the total count."""
        ...

    @abstractmethod
    async def mark_as_read(self, notification_id: int, user_id: str) -> Notification | None:
        """Scoped by (id, user_id); None when no such pair exists."""
        ...

    @abstractmethod
    async def mark_all_as_read(self, user_id: str) -> int:
        ...

    @abstractmethod
    async def count_by_type(self, user_id: str) -> dict[NotificationType, int]:
        ...

    @abstractmethod
    async def count_unread(self, user_id: str) -> int:
        ...

    @abstractmethod
    async def delete_read_before(self, cutoff: datetime) -> int:
        """Delete read notifications created before *cutoff*; unread are kept."""
        ...
