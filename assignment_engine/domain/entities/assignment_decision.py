"""AssignmentDecision — the result of resolving who gets a work order."""

from __future__ import annotations

from dataclasses import dataclass

from assignment_engine.domain.value_objects.enums import DecisionSource


@dataclass
class AssignmentDecision:
    matched_rule_id: int | None = None
    matched_rule_name: str | None = None
    matched_priority: int | None = None
    assign_to_id: str | None = None
    source: DecisionSource | None = None
    notified: bool = False
    notification_error: str | None = None

    def is_empty(self) -> bool:
        return self.assign_to_id is None
