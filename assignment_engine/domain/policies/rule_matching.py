"""RuleMatcher — pure first-match-wins evaluation of assignment rules."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime, timezone

from assignment_engine.domain.entities.assignment_rule import AssignmentRule
from assignment_engine.domain.value_objects.enums import WorkOrderPriority
from assignment_engine.domain.value_objects.match_input import WorkOrderMatchInput

# Rules without a timestamp have not been persisted yet; they sort last
# among equal priorities.
_NOT_YET_CREATED = datetime.max.replace(tzinfo=timezone.utc)


def _creation_key(rule: AssignmentRule) -> tuple:
    created = rule.created_at.astimezone(timezone.utc) if rule.created_at else _NOT_YET_CREATED
    return (created, rule.id if rule.id is not None else float("inf"))


def order_rules(rules: Iterable[AssignmentRule]) -> list[AssignmentRule]:
    """Active rules in evaluation order.

    Priority descending; equal priorities resolve to the earliest created
    rule, then the lowest id, so the order is total and repeatable.
    """
    active = [r for r in rules if r.is_active]
    # Two stable passes: secondary key first, then primary.
    active.sort(key=_creation_key)
    active.sort(key=lambda r: r.priority, reverse=True)
    return active


def _filter_accepts(allowed: frozenset[str], value: str | None) -> bool:
    if not allowed:
        return True
    return value is not None and value in allowed


def rule_matches(rule: AssignmentRule, data: WorkOrderMatchInput) -> bool:
    """Every non-empty filter set must contain the corresponding input value.

    Membership is exact; an absent input field never satisfies a filter.
    """
    return (
        _filter_accepts(rule.asset_types, data.asset_type)
        and _filter_accepts(rule.categories, data.category)
        and _filter_accepts(rule.locations, data.location)
        and _filter_accepts(rule.priorities, data.priority)
    )


def iter_matching_rules(
    data: WorkOrderMatchInput,
    rules: Iterable[AssignmentRule],
) -> Iterator[AssignmentRule]:
    """Yield matching rules in evaluation order."""
    for rule in order_rules(rules):
        if rule_matches(rule, data):
            yield rule


def find_best_match(
    data: WorkOrderMatchInput,
    rules: Iterable[AssignmentRule],
) -> AssignmentRule | None:
    """Return the first matching rule under priority order, or None."""
    return next(iter_matching_rules(data, rules), None)


def validate_rule_conditions(
    *,
    name: str,
    priority: int,
    priorities: Iterable[str],
) -> list[str]:
    """Collect definition problems; an empty list means the rule is usable.

    A rule with no conditions at all is accepted and acts as a catch-all.
    """
    errors: list[str] = []
    if not name or not name.strip():
        errors.append("Name is required")
    if not 0 <= priority <= 100:
        errors.append(f"Priority must be between 0 and 100, got {priority}")
    valid = {p.value for p in WorkOrderPriority}
    for value in sorted(priorities):
        if value not in valid:
            errors.append(f"Invalid priority value: {value}")
    return errors
