"""Tests for the periodic retention sweep."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest

from assignment_engine.application.use_cases.retention_sweep import RetentionSweep
from assignment_engine.domain.entities.notification import Notification
from assignment_engine.domain.errors import StorageFailure
from assignment_engine.domain.value_objects.enums import NotificationType


def _old(nid: int, is_read: bool) -> Notification:
    return Notification(
        id=nid, user_id="tech-1", type=NotificationType.UPDATED, title="t", message="m",
        is_read=is_read, created_at=datetime.now(timezone.utc) - timedelta(days=60),
    )


def _scope_for(dispatcher, opened: list):
    @asynccontextmanager
    async def scope():
        opened.append(True)
        yield dispatcher

    return scope


@pytest.mark.asyncio
async def test_run_once_purges_read_only(dispatcher, inbox):
    inbox.notifications = {1: _old(1, True), 2: _old(2, False)}
    opened: list = []
    sweep = RetentionSweep(_scope_for(dispatcher, opened), days_old=30)

    assert await sweep.run_once() == 1
    assert list(inbox.notifications) == [2]
    assert opened == [True]


@pytest.mark.asyncio
async def test_run_forever_survives_failures(dispatcher, inbox, monkeypatch):
    calls = 0

    async def flaky(cutoff):
        nonlocal calls
        calls += 1
        if calls == 1:
            raise StorageFailure("db down")
        return 0

    monkeypatch.setattr(inbox, "delete_read_before", flaky)
    sweep = RetentionSweep(_scope_for(dispatcher, []), days_old=30)

    task = asyncio.create_task(sweep.run_forever(0.01))
    while calls < 3:
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert calls >= 3
