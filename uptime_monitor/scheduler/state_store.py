from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from uptime_monitor.db.models import ScheduleEntityRow
from uptime_monitor.db.session import SessionLocal


@dataclass
class EntityState:
    target_id: uuid.UUID
    check_interval_sec: int
    next_run_at: datetime | None = None
    wake_token: str | None = None
    last_handled_token: str | None = None

    @property
    def is_running(self) -> bool:
        return self.next_run_at is not None


class EntityStateStore:
    def __init__(self, session_factory: async_sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    async def load(self, target_id: uuid.UUID) -> EntityState | None:
        async with self._session_factory() as session:
            row = await session.get(ScheduleEntityRow, target_id)
            return _to_state(row) if row is not None else None

    async def list_all(self) -> list[EntityState]:
        async with self._session_factory() as session:
            rows = await session.scalars(select(ScheduleEntityRow))
            return [_to_state(row) for row in rows]

    async def save(self, state: EntityState) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.merge(
                    ScheduleEntityRow(
                        target_id=state.target_id,
                        check_interval_sec=state.check_interval_sec,
                        next_run_at=state.next_run_at,
                        wake_token=state.wake_token,
                        last_handled_token=state.last_handled_token,
                    )
                )

    async def erase(self, target_id: uuid.UUID) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(
                    delete(ScheduleEntityRow).where(ScheduleEntityRow.target_id == target_id)
                )


def _to_state(row: ScheduleEntityRow) -> EntityState:
    return EntityState(
        target_id=row.target_id,
        check_interval_sec=row.check_interval_sec,
        next_run_at=_as_utc(row.next_run_at),
        wake_token=row.wake_token,
        last_handled_token=row.last_handled_token,
    )


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands timestamps back naive
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
