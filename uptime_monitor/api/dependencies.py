from __future__ import annotations

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_monitor.db.session import get_session
from uptime_monitor.scheduler.directory import EntityDirectory
from uptime_monitor.services.probe import ProbeExecutor


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def get_directory(request: Request) -> EntityDirectory:
    return request.app.state.directory


def get_probe_executor(request: Request) -> ProbeExecutor:
    return request.app.state.probe_executor
