"""Work order lifecycle events — assignment resolution and status changes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header

from assignment_engine.application.use_cases.assignment_resolver import AssignmentResolver
from assignment_engine.application.use_cases.notification_dispatcher import NotificationDispatcher
from assignment_engine.infrastructure.api.dependencies import (
    get_acting_user_id,
    get_assignment_resolver,
    get_notification_dispatcher,
)
from assignment_engine.infrastructure.api.schemas import (
    ResolveAssignmentRequest,
    StatusChangeRequest,
    serialize_decision,
    serialize_fan_out,
)

router = APIRouter(prefix="/work-orders", tags=["work-orders"])


@router.post("/resolve-assignment")
async def resolve_assignment(
    body: ResolveAssignmentRequest,
    x_user_id: str | None = Header(default=None),
    resolver: AssignmentResolver = Depends(get_assignment_resolver),
):
    """Pick the assignee for a created or reassigned work order.

    The acting user is optional: automatic rule matching needs none, a
    manual override does.
    """
    decision = await resolver.resolve_assignment(
        body.work_order.to_domain(),
        acting_user_id=x_user_id,
        manual_assign_to_id=body.manual_assign_to_id,
    )
    return {"success": True, "data": serialize_decision(decision)}


@router.post("/status-change")
async def status_change(
    body: StatusChangeRequest,
    _user_id: str = Depends(get_acting_user_id),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    result = await dispatcher.notify_status_change(
        body.work_order_id, body.from_status, body.to_status, body.work_order_title
    )
    return {"success": True, "data": serialize_fan_out(result)}
