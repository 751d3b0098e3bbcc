"""Request bodies and response serializers for the HTTP adapter."""

from __future__ import annotations

from pydantic import BaseModel, Field

from assignment_engine.domain.entities.assignment_decision import AssignmentDecision
from assignment_engine.domain.entities.assignment_rule import (
    AssignmentRule,
    RuleChanges,
    RuleDefinition,
)
from assignment_engine.domain.entities.notification import (
    FanOutResult,
    Notification,
    NotificationStats,
)
from assignment_engine.domain.entities.work_order import WorkOrder
from assignment_engine.domain.value_objects.enums import WorkOrderPriority


class RuleCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    priority: int = Field(default=0, ge=0, le=100)
    is_active: bool = True
    asset_types: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    priorities: list[WorkOrderPriority] = Field(default_factory=list)
    assign_to_id: str = Field(min_length=1)

    def to_definition(self) -> RuleDefinition:
        return RuleDefinition(
            name=self.name,
            description=self.description,
            priority=self.priority,
            is_active=self.is_active,
            asset_types=frozenset(self.asset_types),
            categories=frozenset(self.categories),
            locations=frozenset(self.locations),
            priorities=frozenset(p.value for p in self.priorities),
            assign_to_id=self.assign_to_id,
        )


class RuleUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    priority: int | None = Field(default=None, ge=0, le=100)
    is_active: bool | None = None
    asset_types: list[str] | None = None
    categories: list[str] | None = None
    locations: list[str] | None = None
    priorities: list[WorkOrderPriority] | None = None
    assign_to_id: str | None = Field(default=None, min_length=1)

    def to_changes(self) -> RuleChanges:
        def _set(values):
            return frozenset(values) if values is not None else None

        return RuleChanges(
            name=self.name,
            description=self.description,
            priority=self.priority,
            is_active=self.is_active,
            asset_types=_set(self.asset_types),
            categories=_set(self.categories),
            locations=_set(self.locations),
            priorities=_set(p.value for p in self.priorities) if self.priorities is not None else None,
            assign_to_id=self.assign_to_id,
        )


class WorkOrderPayload(BaseModel):
    id: str = Field(min_length=1)
    title: str
    category: str = Field(min_length=1)
    priority: str = Field(min_length=1)
    asset_type: str | None = None
    location: str | None = None
    assigned_to_id: str | None = None
    status: str | None = None

    def to_domain(self) -> WorkOrder:
        return WorkOrder(**self.model_dump())


class ResolveAssignmentRequest(BaseModel):
    work_order: WorkOrderPayload
    manual_assign_to_id: str | None = None


class StatusChangeRequest(BaseModel):
    work_order_id: str = Field(min_length=1)
    work_order_title: str
    from_status: str
    to_status: str


# ─── Serializers ─────────────────────────────────────────────────────


def serialize_rule(rule: AssignmentRule) -> dict:
    return {
        "id": rule.id,
        "name": rule.name,
        "description": rule.description,
        "priority": rule.priority,
        "is_active": rule.is_active,
        "asset_types": sorted(rule.asset_types),
        "categories": sorted(rule.categories),
        "locations": sorted(rule.locations),
        "priorities": sorted(rule.priorities),
        "assign_to_id": rule.assign_to_id,
        "created_at": rule.created_at.isoformat() if rule.created_at else None,
        "updated_at": rule.updated_at.isoformat() if rule.updated_at else None,
    }


def serialize_notification(n: Notification) -> dict:
    return {
        "id": n.id,
        "user_id": n.user_id,
        "type": n.type.value,
        "title": n.title,
        "message": n.message,
        "work_order_id": n.work_order_id,
        "is_read": n.is_read,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


def serialize_decision(d: AssignmentDecision) -> dict:
    return {
        "matched_rule_id": d.matched_rule_id,
        "matched_rule_name": d.matched_rule_name,
        "matched_priority": d.matched_priority,
        "assign_to_id": d.assign_to_id,
        "source": d.source.value if d.source else None,
        "notified": d.notified,
        "notification_error": d.notification_error,
    }


def serialize_stats(stats: NotificationStats) -> dict:
    return {
        "total": stats.total,
        "unread": stats.unread,
        "by_type": {t.value: count for t, count in stats.by_type.items()},
    }


def serialize_fan_out(result: FanOutResult) -> dict:
    return {
        "delivered": [serialize_notification(n) for n in result.delivered],
        "failed": [{"user_id": f.user_id, "reason": f.reason} for f in result.failed],
    }


def pagination(total: int, page: int, limit: int) -> dict:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": (total + limit - 1) // limit if limit else 0,
    }
