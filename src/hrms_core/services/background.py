"""Fire-and-forget background jobs.

Each job runs as an asyncio task with its own session and transaction. The
scheduling call returns the task immediately; callers never need to await
it. Failures are logged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrms_core.database import get_session
from hrms_core.services.compliance_service import ComplianceService

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references so running tasks are not garbage collected
_running: set[asyncio.Task] = set()


def _spawn(
    name: str,
    job: Callable[[AsyncSession], Awaitable[T]],
    factory: async_sessionmaker[AsyncSession] | None,
) -> asyncio.Task[T | None]:
    async def runner() -> T | None:
        try:
            async with get_session(factory) as session:
                return await job(session)
        except Exception:
            logger.exception("Background job %s failed", name)
            return None

    task = asyncio.create_task(runner(), name=name)
    _running.add(task)
    task.add_done_callback(_running.discard)
    return task


def schedule_compliance_sweep(
    factory: async_sessionmaker[AsyncSession] | None = None,
    organization_id: UUID | None = None,
) -> asyncio.Task[int | None]:
    """Run the automated compliance checks in the background."""

    async def job(session: AsyncSession) -> int:
        service = ComplianceService(session)
        if organization_id is not None:
            return await service.execute_automated_compliance_checks_for_organization(
                organization_id
            )
        return await service.execute_automated_compliance_checks()

    return _spawn("compliance-sweep", job, factory)


def schedule_pending_alerts(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> asyncio.Task[int | None]:
    """Dispatch pending violation alerts in the background."""

    async def job(session: AsyncSession) -> int:
        return await ComplianceService(session).send_pending_violation_alerts()

    return _spawn("send-violation-alerts", job, factory)


def running_jobs() -> int:
    return len(_running)
