"""Pytest configuration, in-memory port fakes and shared fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from assignment_engine.application.ports.notification_repo import NotificationRepository
from assignment_engine.application.ports.rule_repo import RuleRepository
from assignment_engine.application.ports.user_directory import UserDirectory
from assignment_engine.application.use_cases.assignment_resolver import AssignmentResolver
from assignment_engine.application.use_cases.notification_dispatcher import NotificationDispatcher
from assignment_engine.domain.entities.assignment_rule import AssignmentRule
from assignment_engine.domain.entities.notification import Notification
from assignment_engine.domain.entities.user import User
from assignment_engine.domain.errors import StorageFailure
from assignment_engine.domain.value_objects.enums import NotificationType, UserRole

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)

# ─── In-memory fakes ────────────────────────────────────────────────


class FakeUserDirectory(UserDirectory):
    def __init__(self, users: list[User] | None = None):
        self.users: dict[str, User] = {u.id: u for u in users or []}
        # Users that turn inactive right after being listed, to model a
        # recipient deactivated between fan-out planning and delivery.
        self.deactivate_after_listing: set[str] = set()

    def add(self, user_id: str, role: UserRole, is_active: bool = True) -> User:
        user = User(id=user_id, role=role, is_active=is_active)
        self.users[user_id] = user
        return user

    async def get_user(self, user_id):
        return self.users.get(user_id)

    async def list_active_by_roles(self, roles):
        roles = set(roles)
        listed = sorted(
            (u for u in self.users.values() if u.is_active and u.role in roles),
            key=lambda u: u.id,
        )
        for user_id in self.deactivate_after_listing:
            if user_id in self.users:
                self.users[user_id].is_active = False
        return listed


class FakeRuleRepo(RuleRepository):
    def __init__(self):
        self.rules: dict[int, AssignmentRule] = {}
        self._ids = count(1)
        self._clock = count(0)

    async def save(self, rule):
        rule.id = next(self._ids)
        rule.created_at = BASE_TIME + timedelta(seconds=next(self._clock))
        rule.updated_at = rule.created_at
        self.rules[rule.id] = rule
        return rule

    async def get_by_id(self, rule_id):
        return self.rules.get(rule_id)

    async def list(self, rule_filter):
        matching = [
            r for r in self.rules.values()
            if (rule_filter.is_active is None or r.is_active == rule_filter.is_active)
            and (rule_filter.assign_to_id is None or r.assign_to_id == rule_filter.assign_to_id)
        ]
        matching.sort(key=lambda r: (-r.priority, -r.created_at.timestamp()))
        start = (rule_filter.page - 1) * rule_filter.limit
        return matching[start:start + rule_filter.limit], len(matching)

    async def update(self, rule_id, changes):
        rule = self.rules.get(rule_id)
        if rule is None:
            return None
        for key, value in changes.as_dict().items():
            setattr(rule, key, value)
        return rule

    async def delete(self, rule_id):
        return self.rules.pop(rule_id, None) is not None

    async def list_active_by_priority(self):
        active = [r for r in self.rules.values() if r.is_active]
        return sorted(active, key=lambda r: (-r.priority, r.created_at, r.id))


class FakeNotificationRepo(NotificationRepository):
    def __init__(self):
        self.notifications: dict[int, Notification] = {}
        self.fail_for: set[str] = set()
        self.create_calls = 0
        self._ids = count(1)

    async def create(self, notification):
        self.create_calls += 1
        if notification.user_id in self.fail_for:
            raise StorageFailure(f"insert failed for {notification.user_id}")
        notification.id = next(self._ids)
        if notification.created_at is None:
            notification.created_at = datetime.now(timezone.utc)
        self.notifications[notification.id] = notification
        return notification

    async def find_assigned(self, user_id, work_order_id):
        return next(
            (
                n for n in self.notifications.values()
                if n.user_id == user_id and n.work_order_id == work_order_id
                and n.type == NotificationType.ASSIGNED
            ),
            None,
        )

    async def get_by_id(self, notification_id):
        return self.notifications.get(notification_id)

    async def find_many(self, notification_filter):
        f = notification_filter
        matching = [
            n for n in self.notifications.values()
            if (f.user_id is None or n.user_id == f.user_id)
            and (f.type is None or n.type == f.type)
            and (f.is_read is None or n.is_read == f.is_read)
            and (f.work_order_id is None or n.work_order_id == f.work_order_id)
        ]
        matching.sort(key=lambda n: (n.created_at, n.id), reverse=True)
        start = (f.page - 1) * f.limit
        return matching[start:start + f.limit], len(matching)

    async def mark_as_read(self, notification_id, user_id):
        n = self.notifications.get(notification_id)
        if n is None or n.user_id != user_id:
            return None
        n.is_read = True
        return n

    async def mark_all_as_read(self, user_id):
        changed = 0
        for n in self.notifications.values():
            if n.user_id == user_id and not n.is_read:
                n.is_read = True
                changed += 1
        return changed

    async def count_by_type(self, user_id):
        counts = {}
        for n in self.notifications.values():
            if n.user_id == user_id:
                counts[n.type] = counts.get(n.type, 0) + 1
        return counts

    async def count_unread(self, user_id):
        return sum(1 for n in self.notifications.values() if n.user_id == user_id and not n.is_read)

    async def delete_read_before(self, cutoff):
        doomed = [
            nid for nid, n in self.notifications.items()
            if n.is_read and n.created_at < cutoff
        ]
        for nid in doomed:
            del self.notifications[nid]
        return len(doomed)


# ─── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def users() -> FakeUserDirectory:
    directory = FakeUserDirectory()
    directory.add("sup-1", UserRole.SUPERVISOR)
    directory.add("admin-1", UserRole.ADMIN)
    directory.add("tech-1", UserRole.TECHNICIAN)
    directory.add("tech-2", UserRole.TECHNICIAN)
    directory.add("tech-gone", UserRole.TECHNICIAN, is_active=False)
    directory.add("emp-1", UserRole.EMPLOYEE)
    return directory


@pytest.fixture
def inbox() -> FakeNotificationRepo:
    return FakeNotificationRepo()


@pytest.fixture
def rule_repo() -> FakeRuleRepo:
    return FakeRuleRepo()


@pytest.fixture
def dispatcher(inbox, users) -> NotificationDispatcher:
    return NotificationDispatcher(notification_repo=inbox, user_directory=users)


@pytest.fixture
def resolver(rule_repo, users, dispatcher) -> AssignmentResolver:
    return AssignmentResolver(rule_repo=rule_repo, user_directory=users, dispatcher=dispatcher)
