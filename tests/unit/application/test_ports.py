"""Port interfaces load and declare the operations adapters must provide."""

from assignment_engine.application.ports.notification_repo import NotificationRepository
from assignment_engine.application.ports.rule_repo import RuleRepository
from assignment_engine.application.ports.user_directory import UserDirectory


def test_rule_repository_operations():
    assert RuleRepository.__abstractmethods__ == {
        "save", "get_by_id", "list", "update", "delete", "list_active_by_priority",
    }


def test_user_directory_operations():
    assert UserDirectory.__abstractmethods__ == {"get_user", "list_active_by_roles"}


def test_notification_repository_declares_idempotency_lookup():
    assert {"create", "find_assigned", "delete_read_before"} <= NotificationRepository.__abstractmethods__
