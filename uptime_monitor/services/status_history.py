from __future__ import annotations

import uuid
from typing import Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_monitor.db.models import CheckResult


class StatusHistoryService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def latest(self, target_id: uuid.UUID) -> CheckResult | None:
        return await self.session.scalar(
            select(CheckResult)
            .where(CheckResult.target_id == target_id)
            .order_by(desc(CheckResult.checked_at))
            .limit(1)
        )

    async def list(
        self,
        target_id: uuid.UUID,
        *,
        offset: int = 0,
        limit: int = 200,
        desc_order: bool = True,
    ) -> Sequence[CheckResult]:
        order_clause = desc(CheckResult.checked_at) if desc_order else CheckResult.checked_at
        rows = await self.session.scalars(
            select(CheckResult)
            .where(CheckResult.target_id == target_id)
            .order_by(order_clause)
            .offset(offset)
            .limit(limit)
        )
        return list(rows)
