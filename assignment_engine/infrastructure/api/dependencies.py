"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from assignment_engine.adapters.persistence.database import async_session_factory, get_session
from assignment_engine.adapters.persistence.repositories import (
    SqlNotificationRepository,
    SqlRuleRepository,
    SqlUserDirectory,
)
from assignment_engine.application.use_cases.assignment_resolver import AssignmentResolver
from assignment_engine.application.use_cases.notification_dispatcher import NotificationDispatcher


def get_acting_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Identity of the caller, as established by the upstream auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="User not authenticated")
    return x_user_id


def get_notification_dispatcher(
    session: AsyncSession = Depends(get_session),
) -> NotificationDispatcher:
    return NotificationDispatcher(
        notification_repo=SqlNotificationRepository(session),
        user_directory=SqlUserDirectory(session),
    )


def get_assignment_resolver(
    session: AsyncSession = Depends(get_session),
) -> AssignmentResolver:
    users = SqlUserDirectory(session)
    return AssignmentResolver(
        rule_repo=SqlRuleRepository(session),
        user_directory=users,
        dispatcher=NotificationDispatcher(
            notification_repo=SqlNotificationRepository(session),
            user_directory=users,
        ),
    )


@asynccontextmanager
async def dispatcher_scope() -> AsyncIterator[NotificationDispatcher]:
    """Stand-alone unit of work for background jobs (retention sweep)."""
    async with async_session_factory() as session:
        yield NotificationDispatcher(
            notification_repo=SqlNotificationRepository(session),
            user_directory=SqlUserDirectory(session),
        )
        await session.commit()
