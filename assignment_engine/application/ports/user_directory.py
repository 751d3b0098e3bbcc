"""Port interface for user lookups (role and active flag)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from assignment_engine.domain.entities.user import User
from assignment_engine.domain.value_objects.enums import UserRole


class UserDirectory(ABC):
    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        ...

    @abstractmethod
    async def list_active_by_roles(self, roles: Iterable[UserRole]) -> list[User]:
        ...
