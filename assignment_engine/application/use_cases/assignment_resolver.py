"""AssignmentResolver — rule administration and work order assignment."""

from __future__ import annotations

import logging
from dataclasses import replace

from assignment_engine.application.ports.rule_repo import RuleRepository
from assignment_engine.application.ports.user_directory import UserDirectory
from assignment_engine.application.use_cases.notification_dispatcher import NotificationDispatcher
from assignment_engine.domain.entities.assignment_decision import AssignmentDecision
from assignment_engine.domain.entities.assignment_rule import (
    AssignmentRule,
    RuleChanges,
    RuleDefinition,
    RuleFilter,
)
from assignment_engine.domain.entities.user import User
from assignment_engine.domain.entities.work_order import WorkOrder
from assignment_engine.domain.errors import (
    EngineError,
    InvalidAssignee,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from assignment_engine.domain.policies.permissions import (
    has_management_role,
    is_manual_assignee,
    is_rule_assignee,
)
from assignment_engine.domain.policies.rule_matching import (
    iter_matching_rules,
    validate_rule_conditions,
)
from assignment_engine.domain.value_objects.enums import DecisionSource

logger = logging.getLogger(__name__)


class AssignmentResolver:
    """Manages assignment rules and decides who receives a work order."""

    def __init__(
        self,
        rule_repo: RuleRepository,
        user_directory: UserDirectory,
        dispatcher: NotificationDispatcher,
    ):
        self._rules = rule_repo
        self._users = user_directory
        self._dispatcher = dispatcher

    # ─── Rule administration ─────────────────────────────────────────

    async def create_rule(self, definition: RuleDefinition, acting_user_id: str) -> AssignmentRule:
        await self._verify_manager(acting_user_id, "create assignment rules")
        self._validate(definition.name, definition.priority, definition.priorities)
        await self._verify_technician(definition.assign_to_id)

        rule = await self._rules.save(
            AssignmentRule(
                id=None,
                name=definition.name.strip(),
                assign_to_id=definition.assign_to_id,
                priority=definition.priority,
                is_active=definition.is_active,
                asset_types=frozenset(definition.asset_types),
                categories=frozenset(definition.categories),
                locations=frozenset(definition.locations),
                priorities=frozenset(definition.priorities),
                description=definition.description,
            )
        )
        logger.info("Rule %s (%s) created by %s", rule.id, rule.name, acting_user_id)
        return rule

    async def get_rule(self, rule_id: int, acting_user_id: str) -> AssignmentRule:
        await self._verify_manager(acting_user_id, "read assignment rules")
        rule = await self._rules.get_by_id(rule_id)
        if rule is None:
            raise NotFound("Assignment rule not found")
        return rule

    async def list_rules(
        self,
        rule_filter: RuleFilter,
        acting_user_id: str,
    ) -> tuple[list[AssignmentRule], int]:
        await self._verify_manager(acting_user_id, "read assignment rules")
        return await self._rules.list(rule_filter)

    async def update_rule(
        self,
        rule_id: int,
        changes: RuleChanges,
        acting_user_id: str,
    ) -> AssignmentRule:
        await self._verify_manager(acting_user_id, "update assignment rules")

        current = await self._rules.get_by_id(rule_id)
        if current is None:
            raise NotFound("Assignment rule not found")

        self._validate(
            changes.name if changes.name is not None else current.name,
            changes.priority if changes.priority is not None else current.priority,
            changes.priorities if changes.priorities is not None else current.priorities,
        )
        if changes.assign_to_id is not None and changes.assign_to_id != current.assign_to_id:
            await self._verify_technician(changes.assign_to_id)
        if changes.name is not None:
            changes = replace(changes, name=changes.name.strip())

        updated = await self._rules.update(rule_id, changes)
        if updated is None:
            raise NotFound("Assignment rule not found")
        logger.info("Rule %s updated by %s: %s", rule_id, acting_user_id, sorted(changes.as_dict()))
        return updated

    async def delete_rule(self, rule_id: int, acting_user_id: str) -> None:
        await self._verify_manager(acting_user_id, "delete assignment rules")
        if not await self._rules.delete(rule_id):
            raise NotFound("Assignment rule not found")
        logger.info("Rule %s deleted by %s", rule_id, acting_user_id)

    # ─── Assignment ──────────────────────────────────────────────────

    async def resolve_assignment(
        self,
        work_order: WorkOrder,
        acting_user_id: str | None = None,
        manual_assign_to_id: str | None = None,
    ) -> AssignmentDecision:
        """Decide the assignee for *work_order* and notify them.

        Order of precedence:
        1. An explicit manual assignee from a supervisor or admin.
        2. The work order's current assignee, if it already has one.
        3. The first matching rule whose assignee is still an active technician.

        An empty decision is a normal outcome. Notification problems are
        logged and recorded on the decision; they never undo the assignment.
        """
        if manual_assign_to_id:
            decision = await self._manual_decision(manual_assign_to_id, acting_user_id)
        elif work_order.is_assigned():
            decision = AssignmentDecision(
                assign_to_id=work_order.assigned_to_id,
                source=DecisionSource.EXISTING,
            )
        else:
            decision = await self._rule_decision(work_order)

        if decision.is_empty():
            logger.info("Work order %s: no assignment rule matched", work_order.id)
            return decision

        logger.info(
            "Work order %s → %s (source=%s, rule=%s)",
            work_order.id, decision.assign_to_id,
            decision.source.value, decision.matched_rule_id,
        )
        await self._notify(work_order, decision)
        return decision

    async def _manual_decision(
        self,
        manual_assign_to_id: str,
        acting_user_id: str | None,
    ) -> AssignmentDecision:
        if acting_user_id is None:
            raise PermissionDenied("Manual assignment requires an acting user")
        await self._verify_manager(acting_user_id, "manual assignment")
        if not is_manual_assignee(await self._users.get_user(manual_assign_to_id)):
            raise InvalidAssignee(
                f"User {manual_assign_to_id} not found, inactive, or not allowed to take work orders"
            )
        return AssignmentDecision(assign_to_id=manual_assign_to_id, source=DecisionSource.MANUAL)

    async def _rule_decision(self, work_order: WorkOrder) -> AssignmentDecision:
        match_input = work_order.match_input()
        snapshot = await self._rules.list_active_by_priority()

        for rule in iter_matching_rules(match_input, snapshot):
            if not is_rule_assignee(await self._users.get_user(rule.assign_to_id)):
                logger.warning(
                    "Work order %s: rule %s matched but assignee %s is not an active technician, skipping",
                    work_order.id, rule.id, rule.assign_to_id,
                )
                continue
            return AssignmentDecision(
                matched_rule_id=rule.id,
                matched_rule_name=rule.name,
                matched_priority=rule.priority,
                assign_to_id=rule.assign_to_id,
                source=DecisionSource.RULE,
            )
        return AssignmentDecision()

    async def _notify(self, work_order: WorkOrder, decision: AssignmentDecision) -> None:
        try:
            await self._dispatcher.notify_assignment(
                work_order.id, decision.assign_to_id, work_order.title
            )
            decision.notified = True
        except EngineError as e:
            logger.warning(
                "Work order %s: assignment notification to %s failed: %s",
                work_order.id, decision.assign_to_id, e,
            )
            decision.notification_error = str(e)

    # ─── Checks ──────────────────────────────────────────────────────

    async def _verify_manager(self, user_id: str, action: str) -> User:
        user = await self._users.get_user(user_id)
        if not has_management_role(user):
            raise PermissionDenied(
                f"Access denied: {action} requires supervisor or admin role"
            )
        return user

    async def _verify_technician(self, user_id: str) -> None:
        if not is_rule_assignee(await self._users.get_user(user_id)):
            raise InvalidAssignee(f"Assigned technician {user_id} not found, inactive, or not a technician")

    @staticmethod
    def _validate(name: str, priority: int, priorities) -> None:
        errors = validate_rule_conditions(name=name, priority=priority, priorities=priorities)
        if errors:
            raise ValidationFailed("; ".join(errors))
