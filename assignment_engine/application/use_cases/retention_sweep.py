"""RetentionSweep — periodic purge of old, already-read notifications."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from assignment_engine.application.use_cases.notification_dispatcher import NotificationDispatcher
from assignment_engine.domain.errors import EngineError

logger = logging.getLogger(__name__)

DispatcherScope = Callable[[], AbstractAsyncContextManager[NotificationDispatcher]]


class RetentionSweep:
    """Runs ``cleanup_old_notifications`` on a timer.

    *dispatcher_scope* opens a fresh unit of work per run; unread
    notifications are never touched.
    """

    def __init__(self, dispatcher_scope: DispatcherScope, days_old: int):
        self._scope = dispatcher_scope
        self._days_old = days_old

    async def run_once(self) -> int:
        async with self._scope() as dispatcher:
            return await dispatcher.cleanup_old_notifications(self._days_old)

    async def run_forever(self, interval_seconds: float) -> None:
        while True:
            try:
                await self.run_once()
            except EngineError as e:
                logger.warning("Retention sweep failed, will retry next interval: %s", e)
            except Exception:
                logger.exception("Unexpected error in retention sweep")
            await asyncio.sleep(interval_seconds)
