"""Notification inbox endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from assignment_engine.application.use_cases.notification_dispatcher import NotificationDispatcher
from assignment_engine.config import settings
from assignment_engine.domain.entities.notification import NotificationFilter
from assignment_engine.domain.value_objects.enums import NotificationType
from assignment_engine.infrastructure.api.dependencies import (
    get_acting_user_id,
    get_notification_dispatcher,
)
from assignment_engine.infrastructure.api.schemas import (
    pagination,
    serialize_notification,
    serialize_stats,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_my_notifications(
    type: NotificationType | None = None,
    is_read: bool | None = None,
    work_order_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user_id: str = Depends(get_acting_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    notifications, total = await dispatcher.list_for_user(
        user_id,
        NotificationFilter(
            type=type, is_read=is_read, work_order_id=work_order_id, page=page, limit=limit
        ),
    )
    return {
        "success": True,
        "data": [serialize_notification(n) for n in notifications],
        "pagination": pagination(total, page, limit),
    }


@router.get("/all")
async def list_all_notifications(
    target_user_id: str | None = Query(default=None, alias="user_id"),
    type: NotificationType | None = None,
    is_read: bool | None = None,
    work_order_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user_id: str = Depends(get_acting_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Supervisor view across all users."""
    notifications, total = await dispatcher.list_for_supervisor(
        NotificationFilter(
            user_id=target_user_id, type=type, is_read=is_read,
            work_order_id=work_order_id, page=page, limit=limit,
        ),
        user_id,
    )
    return {
        "success": True,
        "data": [serialize_notification(n) for n in notifications],
        "pagination": pagination(total, page, limit),
    }


@router.get("/stats")
async def my_stats(
    user_id: str = Depends(get_acting_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    stats = await dispatcher.get_user_stats(user_id)
    return {"success": True, "data": serialize_stats(stats)}


@router.put("/read-all")
async def mark_all_read(
    user_id: str = Depends(get_acting_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    count = await dispatcher.mark_all_as_read(user_id)
    return {"success": True, "data": {"count": count}}


@router.post("/cleanup")
async def cleanup(
    days_old: int = Query(default=settings.notification_retention_days, ge=0),
    user_id: str = Depends(get_acting_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    await dispatcher.verify_supervisor(user_id)
    deleted = await dispatcher.cleanup_old_notifications(days_old)
    return {"success": True, "data": {"deleted": deleted}}


@router.get("/{notification_id}")
async def get_notification(
    notification_id: int,
    user_id: str = Depends(get_acting_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    notification = await dispatcher.get_for_user(notification_id, user_id)
    return {"success": True, "data": serialize_notification(notification)}


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    user_id: str = Depends(get_acting_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    notification = await dispatcher.mark_as_read(notification_id, user_id)
    return {"success": True, "data": serialize_notification(notification)}
