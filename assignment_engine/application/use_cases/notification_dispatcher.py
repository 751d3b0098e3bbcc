"""NotificationDispatcher — turns assignment and status events into inbox entries."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from assignment_engine.application.ports.notification_repo import NotificationRepository
from assignment_engine.application.ports.user_directory import UserDirectory
from assignment_engine.domain.entities.notification import (
    DeliveryFailure,
    FanOutResult,
    Notification,
    NotificationFilter,
    NotificationStats,
)
from assignment_engine.domain.errors import (
    EngineError,
    NotFound,
    PermissionDenied,
    TargetUserInactive,
    ValidationFailed,
)
from assignment_engine.domain.policies.permissions import (
    has_management_role,
    can_receive_notifications,
)
from assignment_engine.domain.value_objects.enums import MANAGEMENT_ROLES, NotificationType

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 30


class NotificationDispatcher:
    """Creates, reads and purges notifications on behalf of the engine."""

    def __init__(self, notification_repo: NotificationRepository, user_directory: UserDirectory):
        self._inbox = notification_repo
        self._users = user_directory

    # ─── Event delivery ──────────────────────────────────────────────

    async def notify_assignment(
        self,
        work_order_id: str,
        assign_to_id: str,
        work_order_title: str,
    ) -> Notification:
        """Tell the assignee about a work order, at most once per pair.

        Raises:
            TargetUserInactive: the assignee is unknown or inactive.
        """
        await self._verify_recipient(assign_to_id)

        existing = await self._inbox.find_assigned(assign_to_id, work_order_id)
        if existing is not None:
            logger.debug(
                "Assignment notification for work order %s → %s already exists (id=%s)",
                work_order_id, assign_to_id, existing.id,
            )
            return existing

        notification = await self._inbox.create(
            Notification(
                id=None,
                user_id=assign_to_id,
                type=NotificationType.ASSIGNED,
                title="New work order assigned",
                message=f"You have been assigned a new work order: {work_order_title}",
                work_order_id=work_order_id,
            )
        )
        logger.info(
            "Work order %s: assignment notification %s sent to %s",
            work_order_id, notification.id, assign_to_id,
        )
        return notification

    async def notify_update(
        self,
        work_order_id: str,
        assign_to_id: str,
        work_order_title: str,
        update_message: str,
    ) -> Notification:
        await self._verify_recipient(assign_to_id)
        return await self._inbox.create(
            Notification(
                id=None,
                user_id=assign_to_id,
                type=NotificationType.UPDATED,
                title="Work order updated",
                message=f'Work order "{work_order_title}" {update_message}',
                work_order_id=work_order_id,
            )
        )

    async def notify_status_change(
        self,
        work_order_id: str,
        from_status: str,
        to_status: str,
        work_order_title: str,
    ) -> FanOutResult:
        """Fan out one UPDATED notification to every active supervisor and admin.

        Each recipient is handled on its own: a failure is recorded in the
        result and the loop continues.
        """
        recipients = await self._users.list_active_by_roles(MANAGEMENT_ROLES)
        result = FanOutResult()

        for recipient in recipients:
            try:
                await self._verify_recipient(recipient.id)
                notification = await self._inbox.create(
                    Notification(
                        id=None,
                        user_id=recipient.id,
                        type=NotificationType.UPDATED,
                        title="Work order status changed",
                        message=(
                            f'Work order "{work_order_title}" status changed '
                            f"from {from_status} to {to_status}"
                        ),
                        work_order_id=work_order_id,
                    )
                )
                result.delivered.append(notification)
            except EngineError as e:
                logger.warning(
                    "Work order %s: status notification to %s failed: %s",
                    work_order_id, recipient.id, e,
                )
                result.failed.append(DeliveryFailure(user_id=recipient.id, reason=str(e)))

        logger.info(
            "Work order %s: status %s → %s notified %d/%d recipients",
            work_order_id, from_status, to_status,
            len(result.delivered), len(recipients),
        )
        return result

    # ─── Inbox access ────────────────────────────────────────────────

    async def list_for_user(
        self,
        user_id: str,
        notification_filter: NotificationFilter | None = None,
    ) -> tuple[list[Notification], int]:
        """Users only ever see their own notifications."""
        base = notification_filter or NotificationFilter()
        scoped = NotificationFilter(
            user_id=user_id,
            type=base.type,
            is_read=base.is_read,
            work_order_id=base.work_order_id,
            page=base.page,
            limit=base.limit,
        )
        return await self._inbox.find_many(scoped)

    async def get_for_user(self, notification_id: int, user_id: str) -> Notification:
        notification = await self._inbox.get_by_id(notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFound("Notification not found")
        return notification

    async def verify_supervisor(self, user_id: str) -> None:
        if not has_management_role(await self._users.get_user(user_id)):
            raise PermissionDenied("Access denied: requires supervisor or admin role")

    async def list_for_supervisor(
        self,
        notification_filter: NotificationFilter,
        supervisor_id: str,
    ) -> tuple[list[Notification], int]:
        await self.verify_supervisor(supervisor_id)
        return await self._inbox.find_many(notification_filter)

    async def mark_as_read(self, notification_id: int, user_id: str) -> Notification:
        notification = await self._inbox.mark_as_read(notification_id, user_id)
        if notification is None:
            raise NotFound("Notification not found")
        return notification

    async def mark_all_as_read(self, user_id: str) -> int:
        return await self._inbox.mark_all_as_read(user_id)

    async def get_user_stats(self, user_id: str) -> NotificationStats:
        counts = await self._inbox.count_by_type(user_id)
        by_type = {t: counts.get(t, 0) for t in NotificationType}
        return NotificationStats(
            total=sum(by_type.values()),
            unread=await self._inbox.count_unread(user_id),
            by_type=by_type,
        )

    async def cleanup_old_notifications(self, days_old: int = DEFAULT_RETENTION_DAYS) -> int:
        """Delete read notifications older than *days_old* days."""
        if days_old < 0:
            raise ValidationFailed("days_old must not be negative")
        cutoff = datetime.now(timezone.utc) - timedelta(days=days_old)
        deleted = await self._inbox.delete_read_before(cutoff)
        logger.info("Retention cleanup: deleted %d read notifications older than %s", deleted, cutoff)
        return deleted

    async def _verify_recipient(self, user_id: str) -> None:
        if not can_receive_notifications(await self._users.get_user(user_id)):
            raise TargetUserInactive(f"Target user {user_id} not found or inactive")
