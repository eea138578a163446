from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Awaitable, Callable

from uptime_monitor.scheduler.entity import ScheduleEntity
from uptime_monitor.scheduler.state_store import EntityStateStore
from uptime_monitor.scheduler.supervisor import TaskSupervisor
from uptime_monitor.services.probe import ProbeExecutor
from uptime_monitor.services.registry import Registry

logger = logging.getLogger(__name__)


class EntityDirectory:
    """Routes control operations to the single schedule entity of a target.

    Entities are created on first use and kept for the life of the process,
    so one target id always resolves to the same instance, also after
    ``delete``. The map is bounded by the number of target ids ever addressed;
    a deleted entity holds no state and no timer, only its lock.
    """

    def __init__(
        self,
        *,
        store: EntityStateStore,
        registry: Registry,
        executor: ProbeExecutor,
        supervisor: TaskSupervisor,
        clock: Callable[[], datetime] | None = None,
        sleep_func: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._executor = executor
        self._supervisor = supervisor
        self._clock = clock
        self._sleep = sleep_func
        self._entities: dict[uuid.UUID, ScheduleEntity] = {}

    def get(self, target_id: uuid.UUID) -> ScheduleEntity:
        entity = self._entities.get(target_id)
        if entity is None:
            entity = ScheduleEntity(
                target_id,
                store=self._store,
                registry=self._registry,
                executor=self._executor,
                clock=self._clock,
                sleep_func=self._sleep,
            )
            self._entities[target_id] = entity
        return entity

    async def init(self, target_id: uuid.UUID, check_interval_sec: int) -> None:
        await self.get(target_id).init(check_interval_sec)

    async def update_check_interval(self, target_id: uuid.UUID, check_interval_sec: int) -> None:
        await self.get(target_id).update_check_interval(check_interval_sec)

    async def pause(self, target_id: uuid.UUID) -> None:
        await self.get(target_id).pause()

    async def resume(self, target_id: uuid.UUID) -> None:
        await self.get(target_id).resume()

    async def delete(self, target_id: uuid.UUID) -> None:
        await self.get(target_id).delete()

    def execute_check(self, target_id: uuid.UUID) -> None:
        logger.info("manual check requested", extra={"target_id": str(target_id)})
        self._executor.execute_check(target_id)

    async def start(self) -> None:
        """Re-arm every persisted entity that was running when the process stopped."""
        states = await self._store.list_all()
        await asyncio.gather(*(self.get(state.target_id).restore(state) for state in states))
        running = sum(1 for state in states if state.is_running)
        logger.info("restored %d schedule entities (%d running)", len(states), running)

    async def shutdown(self, grace_sec: float | None = None) -> None:
        for entity in self._entities.values():
            entity.close()
        await self._supervisor.shutdown(grace_sec)
        logger.info("entity directory stopped")
