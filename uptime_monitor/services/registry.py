from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from uptime_monitor.db.models import CheckResult, Target
from uptime_monitor.db.session import SessionLocal


@dataclass(frozen=True)
class TargetSnapshot:
    id: uuid.UUID
    name: str
    url: str
    check_interval_sec: int
    is_running: bool
    expected_status_code: int | None
    consecutive_failures: int
    active_alert: bool


@dataclass(frozen=True)
class CheckRecord:
    target_id: uuid.UUID
    checked_at: datetime
    http_status: int | None
    latency_ms: int
    is_up: bool
    error: str | None = None


class Registry:
    """Read/write contract the scheduler needs from target storage.

    Every write is a single-column-set UPDATE or an INSERT in its own
    transaction; the run-state and failure-state writers touch disjoint
    columns and never overwrite each other.
    """

    def __init__(self, session_factory: async_sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    async def get_target(self, target_id: uuid.UUID) -> TargetSnapshot | None:
        async with self._session_factory() as session:
            target = await session.scalar(select(Target).where(Target.id == target_id))
            if target is None:
                return None
            return TargetSnapshot(
                id=target.id,
                name=target.name,
                url=target.url,
                check_interval_sec=target.check_interval_sec,
                is_running=target.is_running,
                expected_status_code=target.expected_status_code,
                consecutive_failures=target.consecutive_failures,
                active_alert=target.active_alert,
            )

    async def update_target_run_state(self, target_id: uuid.UUID, is_running: bool) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(
                    update(Target).where(Target.id == target_id).values(is_running=is_running)
                )

    async def update_target_failure_state(
        self,
        target_id: uuid.UUID,
        consecutive_failures: int,
        active_alert: bool,
    ) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(
                    update(Target)
                    .where(Target.id == target_id)
                    .values(consecutive_failures=consecutive_failures, active_alert=active_alert)
                )

    async def insert_check_record(self, record: CheckRecord) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                session.add(
                    CheckResult(
                        target_id=record.target_id,
                        checked_at=record.checked_at,
                        http_status=record.http_status,
                        latency_ms=record.latency_ms,
                        is_up=record.is_up,
                        error=record.error,
                    )
                )
