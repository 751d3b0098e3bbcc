"""AssignmentRule entity — a prioritized filter-to-responder mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class AssignmentRule:
    id: int | None
    name: str
    assign_to_id: str
    priority: int = 0
    is_active: bool = True
    asset_types: frozenset[str] = field(default_factory=frozenset)
    categories: frozenset[str] = field(default_factory=frozenset)
    locations: frozenset[str] = field(default_factory=frozenset)
    priorities: frozenset[str] = field(default_factory=frozenset)
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_catch_all(self) -> bool:
        return not (self.asset_types or self.categories or self.locations or self.priorities)


@dataclass(frozen=True)
class RuleDefinition:
    """Fields a supervisor supplies when creating a rule."""

    name: str
    assign_to_id: str
    priority: int = 0
    is_active: bool = True
    asset_types: frozenset[str] = frozenset()
    categories: frozenset[str] = frozenset()
    locations: frozenset[str] = frozenset()
    priorities: frozenset[str] = frozenset()
    description: str | None = None


@dataclass(frozen=True)
class RuleChanges:
    """Partial update; ``None`` means "leave unchanged".

    An empty ``description`` clears the stored one.
    """

    name: str | None = None
    assign_to_id: str | None = None
    priority: int | None = None
    is_active: bool | None = None
    asset_types: frozenset[str] | None = None
    categories: frozenset[str] | None = None
    locations: frozenset[str] | None = None
    priorities: frozenset[str] | None = None
    description: str | None = None

    def as_dict(self) -> dict:
        changes = {k: v for k, v in self.__dict__.items() if v is not None}
        if changes.get("description") == "":
            changes["description"] = None
        return changes


@dataclass(frozen=True)
class RuleFilter:
    is_active: bool | None = None
    assign_to_id: str | None = None
    page: int = 1
    limit: int = 10
