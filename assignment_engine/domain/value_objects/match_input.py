"""WorkOrderMatchInput — the attributes a rule can filter on."""

from __future__ import annotations

from dataclasses import dataclass

from assignment_engine.domain.errors import ValidationFailed


@dataclass(frozen=True)
class WorkOrderMatchInput:
    category: str
    priority: str
    asset_type: str | None = None
    location: str | None = None

    def __post_init__(self) -> None:
        if not self.category or not self.category.strip():
            raise ValidationFailed("category is required")
        if not self.priority or not self.priority.strip():
            raise ValidationFailed("priority is required")
