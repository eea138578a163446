from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from uptime_monitor.scheduler.state_store import EntityState
from uptime_monitor.services.checker import CheckRequest, CheckResultDTO
from uptime_monitor.services.registry import CheckRecord, TargetSnapshot

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class ManualSleeper:
    """Stand-in for asyncio.sleep that only returns when the test says so."""

    def __init__(self) -> None:
        self.calls: list[tuple[float, asyncio.Future]] = []

    async def __call__(self, delay: float) -> None:
        fut = asyncio.get_running_loop().create_future()
        self.calls.append((delay, fut))
        await fut

    @property
    def pending(self) -> list[tuple[float, asyncio.Future]]:
        return [(delay, fut) for delay, fut in self.calls if not fut.done()]

    def fire_latest(self) -> None:
        _, fut = self.pending[-1]
        fut.set_result(None)


class FakeRegistry:
    def __init__(self) -> None:
        self.targets: dict[uuid.UUID, TargetSnapshot] = {}
        self.records: list[CheckRecord] = []
        self.run_state_writes: list[tuple[uuid.UUID, bool]] = []
        self.failure_writes: list[tuple[uuid.UUID, int, bool]] = []

    def add_target(self, **overrides: object) -> TargetSnapshot:
        fields: dict = {
            "id": uuid.uuid4(),
            "name": "Example",
            "url": "https://example.com/health",
            "check_interval_sec": 30,
            "is_running": True,
            "expected_status_code": None,
            "consecutive_failures": 0,
            "active_alert": False,
        }
        fields.update(overrides)
        target = TargetSnapshot(**fields)
        self.targets[target.id] = target
        return target

    async def get_target(self, target_id: uuid.UUID) -> TargetSnapshot | None:
        return self.targets.get(target_id)

    async def update_target_run_state(self, target_id: uuid.UUID, is_running: bool) -> None:
        self.run_state_writes.append((target_id, is_running))
        if target_id in self.targets:
            self.targets[target_id] = replace(self.targets[target_id], is_running=is_running)

    async def update_target_failure_state(
        self, target_id: uuid.UUID, consecutive_failures: int, active_alert: bool
    ) -> None:
        self.failure_writes.append((target_id, consecutive_failures, active_alert))
        if target_id in self.targets:
            self.targets[target_id] = replace(
                self.targets[target_id],
                consecutive_failures=consecutive_failures,
                active_alert=active_alert,
            )

    async def insert_check_record(self, record: CheckRecord) -> None:
        self.records.append(record)


class FakeStateStore:
    def __init__(self) -> None:
        self.rows: dict[uuid.UUID, EntityState] = {}

    async def load(self, target_id: uuid.UUID) -> EntityState | None:
        row = self.rows.get(target_id)
        return replace(row) if row is not None else None

    async def list_all(self) -> list[EntityState]:
        return [replace(row) for row in self.rows.values()]

    async def save(self, state: EntityState) -> None:
        self.rows[state.target_id] = replace(state)

    async def erase(self, target_id: uuid.UUID) -> None:
        self.rows.pop(target_id, None)


class RecordingExecutor:
    def __init__(self) -> None:
        self.dispatched: list[uuid.UUID] = []

    def execute_check(self, target_id: uuid.UUID) -> None:
        self.dispatched.append(target_id)


class ScriptedChecker:
    """Returns canned outcomes in order: (is_up, http_status, error)."""

    def __init__(self, outcomes: list[tuple[bool, int | None, str | None]]) -> None:
        self._outcomes = list(outcomes)
        self.requests: list[CheckRequest] = []

    async def check(self, req: CheckRequest) -> CheckResultDTO:
        self.requests.append(req)
        is_up, http_status, error = self._outcomes.pop(0)
        return CheckResultDTO(
            target_id=req.target_id,
            is_up=is_up,
            http_status=http_status,
            latency_ms=12,
            error=error,
            checked_at=datetime.now(timezone.utc),
        )


async def settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)

