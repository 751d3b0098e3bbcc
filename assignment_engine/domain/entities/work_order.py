"""WorkOrder descriptor — what the surrounding service hands to the resolver."""

from __future__ import annotations

from dataclasses import dataclass

from assignment_engine.domain.value_objects.match_input import WorkOrderMatchInput


@dataclass
class WorkOrder:
    id: str
    title: str
    category: str
    priority: str
    asset_type: str | None = None
    location: str | None = None
    assigned_to_id: str | None = None
    status: str | None = None

    def match_input(self) -> WorkOrderMatchInput:
        return WorkOrderMatchInput(
            category=self.category,
            priority=self.priority,
            asset_type=self.asset_type,
            location=self.location,
        )

    def is_assigned(self) -> bool:
        return bool(self.assigned_to_id)
