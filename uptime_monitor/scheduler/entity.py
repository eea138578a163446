from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError

from uptime_monitor.core.errors import NotInitializedError
from uptime_monitor.scheduler.state_store import EntityState, EntityStateStore
from uptime_monitor.services.probe import ProbeExecutor
from uptime_monitor.services.registry import Registry

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WakeUpDelivery:
    token: str | None
    is_retry: bool = False
    retry_count: int = 0


class ScheduleEntity:
    """Owns the recurring timer of one target.

    All operations on an entity run one at a time under its lock. The entity
    is Uninitialized until ``init``; Active while ``next_run_at`` is set and a
    timer task is sleeping towards it; Paused when initialized without one.
    Every armed fire carries a fresh token and a wake-up is honoured only for
    the token currently scheduled and not yet handled.
    """

    def __init__(
        self,
        target_id: uuid.UUID,
        *,
        store: EntityStateStore,
        registry: Registry,
        executor: ProbeExecutor,
        clock: Callable[[], datetime] | None = None,
        sleep_func: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self.target_id = target_id
        self._store = store
        self._registry = registry
        self._executor = executor
        self._clock = clock or _utcnow
        self._sleep = sleep_func or asyncio.sleep
        self._lock = asyncio.Lock()
        self._state: EntityState | None = None
        self._loaded = False
        self._timer: asyncio.Task | None = None

    @property
    def state(self) -> EntityState | None:
        return self._state

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def init(self, check_interval_sec: int) -> None:
        async with self._lock:
            logger.info("initializing schedule entity", extra={"target_id": str(self.target_id)})
            self._state = EntityState(target_id=self.target_id, check_interval_sec=check_interval_sec)
            self._loaded = True
            self._trigger_check()
            await self._arm()
            await self._set_run_state(True)

    async def update_check_interval(self, check_interval_sec: int) -> None:
        async with self._lock:
            state = await self._require_state()
            logger.info(
                "updating check interval to %ss",
                check_interval_sec,
                extra={"target_id": str(self.target_id)},
            )
            state.check_interval_sec = check_interval_sec
            if state.is_running:
                await self._arm()
            else:
                await self._persist()

    async def pause(self) -> None:
        async with self._lock:
            state = await self._require_state()
            logger.info("pausing schedule entity", extra={"target_id": str(self.target_id)})
            self._cancel_timer()
            state.next_run_at = None
            state.wake_token = None
            await self._persist()
            await self._set_run_state(False)

    async def resume(self) -> None:
        async with self._lock:
            state = await self._require_state()
            logger.info(
                "resuming schedule entity with check interval %ss",
                state.check_interval_sec,
                extra={"target_id": str(self.target_id)},
            )
            await self._arm()
            await self._set_run_state(True)

    async def delete(self) -> None:
        async with self._lock:
            logger.info("deleting schedule entity", extra={"target_id": str(self.target_id)})
            await self._store.erase(self.target_id)
            self._cancel_timer()
            self._state = None
            self._loaded = True

    async def on_wake_up(self, delivery: WakeUpDelivery) -> None:
        async with self._lock:
            state = await self._require_state()
            if delivery.is_retry:
                logger.info(
                    "received wake-up retry #%d, not retrying",
                    delivery.retry_count,
                    extra={"target_id": str(self.target_id)},
                )
                return
            if delivery.token is None or delivery.token != state.wake_token or delivery.token == state.last_handled_token:
                logger.info("dropping stale or duplicate wake-up", extra={"target_id": str(self.target_id)})
                return

            state.last_handled_token = delivery.token
            self._trigger_check()
            await self._arm()

    async def restore(self, state: EntityState) -> None:
        """Adopt persisted state after a process start and re-arm if it was running."""
        async with self._lock:
            self._state = state
            self._loaded = True
            if not state.is_running:
                return
            if state.wake_token is None:
                state.wake_token = uuid.uuid4().hex
                await self._persist()
            self._start_timer()

    def close(self) -> None:
        """Stop the in-memory timer, leaving the durable state for the next start."""
        self._cancel_timer()

    def _trigger_check(self) -> None:
        logger.info("triggering check", extra={"target_id": str(self.target_id)})
        self._executor.execute_check(self.target_id)

    async def _require_state(self) -> EntityState:
        if not self._loaded:
            self._state = await self._store.load(self.target_id)
            self._loaded = True
        if self._state is None:
            raise NotInitializedError(self.target_id)
        return self._state

    async def _arm(self) -> None:
        state = self._state
        assert state is not None
        self._cancel_timer()
        state.next_run_at = self._clock() + timedelta(seconds=state.check_interval_sec)
        state.wake_token = uuid.uuid4().hex
        self._start_timer()
        await self._persist()
        logger.info(
            "scheduled next check at %s",
            state.next_run_at.isoformat(),
            extra={"target_id": str(self.target_id)},
        )

    def _start_timer(self) -> None:
        state = self._state
        assert state is not None and state.next_run_at is not None
        delay = max(0.0, (state.next_run_at - self._clock()).total_seconds())
        self._timer = asyncio.create_task(
            self._run_timer(state.wake_token, delay),
            name=f"wake-up:{self.target_id}",
        )

    async def _run_timer(self, token: str | None, delay: float) -> None:
        await self._sleep(delay)
        await self.on_wake_up(WakeUpDelivery(token=token))

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        # a timer re-arming from inside its own wake-up must not cancel itself
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()

    async def _persist(self) -> None:
        assert self._state is not None
        try:
            await self._store.save(self._state)
        except SQLAlchemyError:
            logger.exception("failed to persist schedule state", extra={"target_id": str(self.target_id)})

    async def _set_run_state(self, is_running: bool) -> None:
        try:
            await self._registry.update_target_run_state(self.target_id, is_running)
        except SQLAlchemyError:
            logger.exception("failed to persist run state", extra={"target_id": str(self.target_id)})
