from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from uptime_monitor.api.routers import health, targets
from uptime_monitor.workers.runner import build_runtime


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    runtime = build_runtime()
    app.state.directory = runtime.directory
    app.state.probe_executor = runtime.executor
    app.state.supervisor = runtime.supervisor
    await runtime.directory.start()
    try:
        yield
    finally:
        await runtime.directory.shutdown()


app = FastAPI(title="Uptime Monitor API", lifespan=lifespan)

app.include_router(targets.router)
app.include_router(health.router)
