"""Notification entity — an inbox entry addressed to one user."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from assignment_engine.domain.value_objects.enums import NotificationType


@dataclass
class Notification:
    id: int | None
    user_id: str
    type: NotificationType
    title: str
    message: str
    work_order_id: str | None = None
    is_read: bool = False
    created_at: datetime | None = None


@dataclass(frozen=True)
class NotificationFilter:
    user_id: str | None = None
    type: NotificationType | None = None
    is_read: bool | None = None
    work_order_id: str | None = None
    page: int = 1
    limit: int = 20


@dataclass
class NotificationStats:
    total: int
    unread: int
    by_type: dict[NotificationType, int] = field(default_factory=dict)


@dataclass(frozen=True)
class DeliveryFailure:
    user_id: str
    reason: str


@dataclass
class FanOutResult:
    """Outcome of a per-recipient fan-out; partial success is normal."""

    delivered: list[Notification] = field(default_factory=list)
    failed: list[DeliveryFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed
