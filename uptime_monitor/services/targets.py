from __future__ import annotations

import uuid
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_monitor.db.models import Target

_UNSET = object()


class TargetService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        *,
        name: str,
        url: str,
        check_interval_sec: int,
        expected_status_code: int | None = None,
        is_running: bool = True,
    ) -> Target:
        target = Target(
            name=name,
            url=url,
            check_interval_sec=check_interval_sec,
            expected_status_code=expected_status_code,
            is_running=is_running,
            consecutive_failures=0,
            active_alert=False,
        )
        self.session.add(target)
        await self.session.flush()
        return target

    async def get(self, target_id: uuid.UUID) -> Target | None:
        return await self.session.get(Target, target_id)

    async def list(self, *, offset: int = 0, limit: int = 100) -> Sequence[Target]:
        rows = await self.session.scalars(
            select(Target)
            .order_by(Target.created_at)
            .offset(offset)
            .limit(limit)
        )
        return list(rows)

    async def update(
        self,
        target_id: uuid.UUID,
        *,
        name: str | None = None,
        url: str | None = None,
        check_interval_sec: int | None = None,
        expected_status_code: int | None | object = _UNSET,
        consecutive_failures: int | None = None,
        active_alert: bool | None = None,
    ) -> Target | None:
        target = await self.session.get(Target, target_id)
        if target is None:
            return None

        if name is not None:
            target.name = name
        if url is not None:
            target.url = url
        if check_interval_sec is not None:
            target.check_interval_sec = check_interval_sec
        # None is meaningful here: it restores the default 2xx/3xx check
        if expected_status_code is not _UNSET:
            target.expected_status_code = expected_status_code
        if consecutive_failures is not None:
            target.consecutive_failures = consecutive_failures
        if active_alert is not None:
            target.active_alert = active_alert

        await self.session.flush()
        return target

    async def delete(self, target_id: uuid.UUID) -> bool:
        target = await self.session.get(Target, target_id)
        if target is None:
            return False
        await self.session.delete(target)
        await self.session.flush()
        return True
