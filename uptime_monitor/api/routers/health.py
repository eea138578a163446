from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_monitor.api.dependencies import get_db_session

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request, session: AsyncSession = Depends(get_db_session)) -> dict:
    await session.execute(select(1))
    supervisor = getattr(request.app.state, "supervisor", None)
    return {
        "status": "ok",
        "in_flight_checks": supervisor.in_flight if supervisor is not None else 0,
    }
