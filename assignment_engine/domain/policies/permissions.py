"""Role checks used by the resolver and dispatcher."""

from __future__ import annotations

from assignment_engine.domain.entities.user import User
from assignment_engine.domain.value_objects.enums import MANAGEMENT_ROLES, UserRole

# Manual assignment may target anyone who can work an order, not only
# technicians.
MANUAL_ASSIGNEE_ROLES = frozenset({UserRole.TECHNICIAN, *MANAGEMENT_ROLES})


def has_management_role(user: User | None) -> bool:
    return user is not None and user.is_active and user.is_management()


def is_rule_assignee(user: User | None) -> bool:
    """Rules may only route work to active technicians."""
    return user is not None and user.is_active and user.is_technician()


def is_manual_assignee(user: User | None) -> bool:
    return user is not None and user.is_active and user.role in MANUAL_ASSIGNEE_ROLES


def can_receive_notifications(user: User | None) -> bool:
    return user is not None and user.is_active
