from __future__ import annotations

import os
from collections.abc import AsyncIterator

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from helpers import FakeClock, FakeRegistry, FakeStateStore, ManualSleeper, RecordingExecutor, settle
from uptime_monitor.db.models import Base
from uptime_monitor.scheduler.directory import EntityDirectory
from uptime_monitor.scheduler.supervisor import TaskSupervisor


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper() -> ManualSleeper:
    return ManualSleeper()


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def store() -> FakeStateStore:
    return FakeStateStore()


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
async def directory(
    store: FakeStateStore,
    registry: FakeRegistry,
    executor: RecordingExecutor,
    clock: FakeClock,
    sleeper: ManualSleeper,
) -> AsyncIterator[EntityDirectory]:
    directory = EntityDirectory(
        store=store,  # type: ignore[arg-type]
        registry=registry,  # type: ignore[arg-type]
        executor=executor,  # type: ignore[arg-type]
        supervisor=TaskSupervisor(concurrency=4),
        clock=clock,
        sleep_func=sleeper,
    )
    yield directory
    await directory.shutdown(grace_sec=0)
    await settle()


@pytest.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker]:
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()
