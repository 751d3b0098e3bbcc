"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class UserRole(str, Enum):
    EMPLOYEE = "EMPLOYEE"
    TECHNICIAN = "TECHNICIAN"
    SUPERVISOR = "SUPERVISOR"
    ADMIN = "ADMIN"


class NotificationType(str, Enum):
    ASSIGNED = "WORK_ORDER_ASSIGNED"
    UPDATED = "WORK_ORDER_UPDATED"
    SYSTEM_ALERT = "SYSTEM_ALERT"


class WorkOrderPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class DecisionSource(str, Enum):
    RULE = "rule"
    MANUAL = "manual"
    EXISTING = "existing"


MANAGEMENT_ROLES = frozenset({UserRole.SUPERVISOR, UserRole.ADMIN})
