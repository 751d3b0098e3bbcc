"""User entity — the UserDirectory's view of an account."""

from dataclasses import dataclass

from assignment_engine.domain.value_objects.enums import MANAGEMENT_ROLES, UserRole


@dataclass
class User:
    id: str
    role: UserRole
    is_active: bool = True
    name: str | None = None

    def is_management(self) -> bool:
        return self.role in MANAGEMENT_ROLES

    def is_technician(self) -> bool:
        return self.role == UserRole.TECHNICIAN
