"""Port interface for assignment rule persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod

from assignment_engine.domain.entities.assignment_rule import (
    AssignmentRule,
    RuleChanges,
    RuleFilter,
)


class RuleRepository(ABC):
    @abstractmethod
    async def save(self, rule: AssignmentRule) -> AssignmentRule:
        ...

    @abstractmethod
    async def get_by_id(self, rule_id: int) -> AssignmentRule | None:
        ...

    @abstractmethod
    async def list(self, rule_filter: RuleFilter) -> tuple[list[AssignmentRule], int]:
        """Return one page of rules plus the total count matching the filter."""
        ...

    @abstractmethod
    async def update(self, rule_id: int, changes: RuleChanges) -> AssignmentRule | None:
        """Apply changes under a row lock. Returns None if the rule is gone."""
        ...

    @abstractmethod
    async def delete(self, rule_id: int) -> bool:
        ...

    @abstractmethod
    async def list_active_by_priority(self) -> list[AssignmentRule]:
        """One consistent snapshot of active rules, priority DESC, created_at ASC."""
        ...
