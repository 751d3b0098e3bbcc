"""SQLAlchemy repository implementations."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from assignment_engine.adapters.persistence.models import (
    AssignmentRuleModel,
    NotificationModel,
    UserModel,
)
from assignment_engine.application.ports.notification_repo import NotificationRepository
from assignment_engine.application.ports.rule_repo import RuleRepository
from assignment_engine.application.ports.user_directory import UserDirectory
from assignment_engine.domain.entities.assignment_rule import (
    AssignmentRule,
    RuleChanges,
    RuleFilter,
)
from assignment_engine.domain.entities.notification import Notification, NotificationFilter
from assignment_engine.domain.entities.user import User
from assignment_engine.domain.errors import StorageFailure
from assignment_engine.domain.value_objects.enums import NotificationType, UserRole

_SET_FIELDS = ("asset_types", "categories", "locations", "priorities")

# ─── Mappers ─────────────────────────────────────────────────────────


def _user_to_domain(m: UserModel) -> User:
    return User(id=m.id, role=UserRole(m.role), is_active=m.is_active, name=m.name)


def _rule_to_domain(m: AssignmentRuleModel) -> AssignmentRule:
    return AssignmentRule(
        id=m.id,
        name=m.name,
        assign_to_id=m.assign_to_id,
        priority=m.priority,
        is_active=m.is_active,
        asset_types=frozenset(m.asset_types or ()),
        categories=frozenset(m.categories or ()),
        locations=frozenset(m.locations or ()),
        priorities=frozenset(m.priorities or ()),
        description=m.description,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


def _notification_to_domain(m: NotificationModel) -> Notification:
    return Notification(
        id=m.id,
        user_id=m.user_id,
        type=NotificationType(m.type),
        title=m.title,
        message=m.message,
        work_order_id=m.work_order_id,
        is_read=m.is_read,
        created_at=m.created_at,
    )


def _page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


# ─── Repositories ────────────────────────────────────────────────────


class SqlUserDirectory(UserDirectory):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_user(self, user_id: str) -> User | None:
        try:
            m = await self._s.get(UserModel, user_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise StorageFailure(f"user lookup failed: {e}") from e
        return _user_to_domain(m) if m else None

    async def list_active_by_roles(self, roles: Iterable[UserRole]) -> list[User]:
        role_values = sorted(r.value for r in roles)
        try:
            result = await self._s.execute(
                select(UserModel)
                .where(UserModel.role.in_(role_values), UserModel.is_active.is_(True))
                .order_by(UserModel.id)
            )
        except SQLAlchemyError as e:
            raise StorageFailure(f"user listing failed: {e}") from e
        return [_user_to_domain(m) for m in result.scalars()]


class SqlRuleRepository(RuleRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, rule: AssignmentRule) -> AssignmentRule:
        m = AssignmentRuleModel(
            name=rule.name,
            description=rule.description,
            priority=rule.priority,
            is_active=rule.is_active,
            asset_types=sorted(rule.asset_types),
            categories=sorted(rule.categories),
            locations=sorted(rule.locations),
            priorities=sorted(rule.priorities),
            assign_to_id=rule.assign_to_id,
        )
        try:
            self._s.add(m)
            await self._s.flush()
            await self._s.refresh(m)
        except SQLAlchemyError as e:
            raise StorageFailure(f"rule insert failed: {e}") from e
        return _rule_to_domain(m)

    async def get_by_id(self, rule_id: int) -> AssignmentRule | None:
        try:
            m = await self._s.get(AssignmentRuleModel, rule_id)
        except SQLAlchemyError as e:
            raise StorageFailure(f"rule lookup failed: {e}") from e
        return _rule_to_domain(m) if m else None

    async def list(self, rule_filter: RuleFilter) -> tuple[list[AssignmentRule], int]:
        conditions = []
        if rule_filter.is_active is not None:
            conditions.append(AssignmentRuleModel.is_active.is_(rule_filter.is_active))
        if rule_filter.assign_to_id is not None:
            conditions.append(AssignmentRuleModel.assign_to_id == rule_filter.assign_to_id)

        try:
            total = (
                await self._s.execute(
                    select(func.count(AssignmentRuleModel.id)).where(*conditions)
                )
            ).scalar() or 0
            result = await self._s.execute(
                select(AssignmentRuleModel)
                .where(*conditions)
                .order_by(AssignmentRuleModel.priority.desc(), AssignmentRuleModel.created_at.desc())
                .offset(_page_offset(rule_filter.page, rule_filter.limit))
                .limit(rule_filter.limit)
            )
        except SQLAlchemyError as e:
            raise StorageFailure(f"rule listing failed: {e}") from e
        return [_rule_to_domain(m) for m in result.scalars()], total

    async def update(self, rule_id: int, changes: RuleChanges) -> AssignmentRule | None:
        try:
            # Row lock serializes concurrent edits of the same rule.
            result = await self._s.execute(
                select(AssignmentRuleModel)
                .where(AssignmentRuleModel.id == rule_id)
                .with_for_update()
            )
            m = result.scalar_one_or_none()
            if m is None:
                return None
            for key, value in changes.as_dict().items():
                setattr(m, key, sorted(value) if key in _SET_FIELDS else value)
            await self._s.flush()
            await self._s.refresh(m)
        except SQLAlchemyError as e:
            raise StorageFailure(f"rule update failed: {e}") from e
        return _rule_to_domain(m)

    async def delete(self, rule_id: int) -> bool:
        try:
            result = await self._s.execute(
                delete(AssignmentRuleModel).where(AssignmentRuleModel.id == rule_id)
            )
            await self._s.flush()
        except SQLAlchemyError as e:
            raise StorageFailure(f"rule delete failed: {e}") from e
        return result.rowcount > 0

    async def list_active_by_priority(self) -> list[AssignmentRule]:
        try:
            result = await self._s.execute(
                select(AssignmentRuleModel)
                .where(AssignmentRuleModel.is_active.is_(True))
                .order_by(
                    AssignmentRuleModel.priority.desc(),
                    AssignmentRuleModel.created_at.asc(),
                    AssignmentRuleModel.id.asc(),
                )
            )
        except SQLAlchemyError as e:
            raise StorageFailure(f"rule snapshot failed: {e}") from e
        return [_rule_to_domain(m) for m in result.scalars()]


class SqlNotificationRepository(NotificationRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def create(self, notification: Notification) -> Notification:
        m = NotificationModel(
            user_id=notification.user_id,
            type=notification.type.value,
            title=notification.title,
            message=notification.message,
            work_order_id=notification.work_order_id,
            is_read=notification.is_read,
        )
        try:
            # SAVEPOINT: a failed insert must not poison the caller's transaction.
            async with self._s.begin_nested():
                self._s.add(m)
                await self._s.flush()
            await self._s.refresh(m)
        except IntegrityError as e:
            if notification.type == NotificationType.ASSIGNED and notification.work_order_id:
                existing = await self.find_assigned(notification.user_id, notification.work_order_id)
                if existing is not None:
                    return existing
            raise StorageFailure(f"notification insert failed: {e}") from e
        except SQLAlchemyError as e:
            raise StorageFailure(f"notification insert failed: {e}") from e
        return _notification_to_domain(m)

    async def find_assigned(self, user_id: str, work_order_id: str) -> Notification | None:
        try:
            result = await self._s.execute(
                select(NotificationModel).where(
                    NotificationModel.user_id == user_id,
                    NotificationModel.work_order_id == work_order_id,
                    NotificationModel.type == NotificationType.ASSIGNED.value,
                )
            )
        except SQLAlchemyError as e:
            raise StorageFailure(f"notification lookup failed: {e}") from e
        m = result.scalars().first()
        return _notification_to_domain(m) if m else None

    async def get_by_id(self, notification_id: int) -> Notification | None:
        try:
            m = await self._s.get(NotificationModel, notification_id)
        except SQLAlchemyError as e:
            raise StorageFailure(f"notification lookup failed: {e}") from e
        return _notification_to_domain(m) if m else None

    async def find_many(self, notification_filter: NotificationFilter) -> tuple[list[Notification], int]:
        f = notification_filter
        conditions = []
        if f.user_id is not None:
            conditions.append(NotificationModel.user_id == f.user_id)
        if f.type is not None:
            conditions.append(NotificationModel.type == f.type.value)
        if f.is_read is not None:
            conditions.append(NotificationModel.is_read.is_(f.is_read))
        if f.work_order_id is not None:
            conditions.append(NotificationModel.work_order_id == f.work_order_id)

        try:
            total = (
                await self._s.execute(select(func.count(NotificationModel.id)).where(*conditions))
            ).scalar() or 0
            result = await self._s.execute(
                select(NotificationModel)
                .where(*conditions)
                .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
                .offset(_page_offset(f.page, f.limit))
                .limit(f.limit)
            )
        except SQLAlchemyError as e:
            raise StorageFailure(f"notification listing failed: {e}") from e
        return [_notification_to_domain(m) for m in result.scalars()], total

    async def mark_as_read(self, notification_id: int, user_id: str) -> Notification | None:
        try:
            result = await self._s.execute(
                update(NotificationModel)
                .where(NotificationModel.id == notification_id, NotificationModel.user_id == user_id)
                .values(is_read=True)
                .returning(NotificationModel)
            )
            m = result.scalar_one_or_none()
            await self._s.flush()
        except SQLAlchemyError as e:
            raise StorageFailure(f"notification update failed: {e}") from e
        return _notification_to_domain(m) if m else None

    async def mark_all_as_read(self, user_id: str) -> int:
        try:
            result = await self._s.execute(
                update(NotificationModel)
                .where(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
                .values(is_read=True)
            )
            await self._s.flush()
        except SQLAlchemyError as e:
            raise StorageFailure(f"notification update failed: {e}") from e
        return result.rowcount

    async def count_by_type(self, user_id: str) -> dict[NotificationType, int]:
        try:
            rows = (
                await self._s.execute(
                    select(NotificationModel.type, func.count(NotificationModel.id))
                    .where(NotificationModel.user_id == user_id)
                    .group_by(NotificationModel.type)
                )
            ).all()
        except SQLAlchemyError as e:
            raise StorageFailure(f"notification stats failed: {e}") from e
        return {NotificationType(row[0]): row[1] for row in rows}

    async def count_unread(self, user_id: str) -> int:
        try:
            return (
                await self._s.execute(
                    select(func.count(NotificationModel.id)).where(
                        NotificationModel.user_id == user_id,
                        NotificationModel.is_read.is_(False),
                    )
                )
            ).scalar() or 0
        except SQLAlchemyError as e:
            raise StorageFailure(f"notification stats failed: {e}") from e

    async def delete_read_before(self, cutoff: datetime) -> int:
        try:
            result = await self._s.execute(
                delete(NotificationModel).where(
                    NotificationModel.is_read.is_(True),
                    NotificationModel.created_at < cutoff,
                )
            )
            await self._s.flush()
        except SQLAlchemyError as e:
            raise StorageFailure(f"notification cleanup failed: {e}") from e
        return result.rowcount
