"""Assignment rule endpoints — supervisor/admin administration."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from assignment_engine.application.use_cases.assignment_resolver import AssignmentResolver
from assignment_engine.domain.entities.assignment_rule import RuleFilter
from assignment_engine.infrastructure.api.dependencies import (
    get_acting_user_id,
    get_assignment_resolver,
)
from assignment_engine.infrastructure.api.schemas import (
    RuleCreateRequest,
    RuleUpdateRequest,
    pagination,
    serialize_rule,
)

router = APIRouter(prefix="/assignment-rules", tags=["assignment-rules"])


@router.post("", status_code=201)
async def create_rule(
    body: RuleCreateRequest,
    user_id: str = Depends(get_acting_user_id),
    resolver: AssignmentResolver = Depends(get_assignment_resolver),
):
    rule = await resolver.create_rule(body.to_definition(), user_id)
    return {"success": True, "data": serialize_rule(rule)}


@router.get("")
async def list_rules(
    is_active: bool | None = None,
    assign_to_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user_id: str = Depends(get_acting_user_id),
    resolver: AssignmentResolver = Depends(get_assignment_resolver),
):
    rules, total = await resolver.list_rules(
        RuleFilter(is_active=is_active, assign_to_id=assign_to_id, page=page, limit=limit),
        user_id,
    )
    return {
        "success": True,
        "data": [serialize_rule(r) for r in rules],
        "pagination": pagination(total, page, limit),
    }


@router.get("/{rule_id}")
async def get_rule(
    rule_id: int,
    user_id: str = Depends(get_acting_user_id),
    resolver: AssignmentResolver = Depends(get_assignment_resolver),
):
    rule = await resolver.get_rule(rule_id, user_id)
    return {"success": True, "data": serialize_rule(rule)}


@router.patch("/{rule_id}")
async def update_rule(
    rule_id: int,
    body: RuleUpdateRequest,
    user_id: str = Depends(get_acting_user_id),
    resolver: AssignmentResolver = Depends(get_assignment_resolver),
):
    rule = await resolver.update_rule(rule_id, body.to_changes(), user_id)
    return {"success": True, "data": serialize_rule(rule)}


@router.delete("/{rule_id}")
async def delete_rule(
    rule_id: int,
    user_id: str = Depends(get_acting_user_id),
    resolver: AssignmentResolver = Depends(get_assignment_resolver),
):
    await resolver.delete_rule(rule_id, user_id)
    return {"success": True}
