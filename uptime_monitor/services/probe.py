from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError

from uptime_monitor.alerts.base import AlertSender
from uptime_monitor.scheduler.supervisor import TaskSupervisor
from uptime_monitor.services.checker import CheckRequest, CheckResultDTO, Checker
from uptime_monitor.services.failure_tracking import evaluate
from uptime_monitor.services.registry import CheckRecord, Registry, TargetSnapshot

logger = logging.getLogger(__name__)


class ProbeExecutor:
    """Probes one target, records the outcome and drives failure tracking.

    Target configuration is re-read on every probe, so edits to the url or
    expected status code apply on the next run without touching any timer.
    """

    def __init__(
        self,
        registry: Registry,
        alert_sender: AlertSender,
        supervisor: TaskSupervisor,
        checker: Checker | None = None,
    ) -> None:
        self._registry = registry
        self._alert_sender = alert_sender
        self._supervisor = supervisor
        self._checker = checker or Checker()

    def execute_check(self, target_id: uuid.UUID) -> None:
        """Dispatch a probe in the background and return immediately."""
        self._supervisor.spawn(lambda: self.run_check(target_id), name=f"probe:{target_id}")

    async def run_check(self, target_id: uuid.UUID) -> CheckResultDTO | None:
        try:
            target = await self._registry.get_target(target_id)
        except SQLAlchemyError:
            logger.exception("failed to load target", extra={"target_id": str(target_id)})
            return None
        if target is None:
            logger.warning("target no longer exists, skipping check", extra={"target_id": str(target_id)})
            return None

        logger.info("performing check for %s (%s)", target.name, target.url, extra={"target_id": str(target.id)})
        result = await self._checker.check(
            CheckRequest(
                target_id=str(target.id),
                url=target.url,
                expected_status_code=target.expected_status_code,
            )
        )
        if result.error:
            logger.warning(
                "check failed for %s: %s",
                target.name,
                result.error,
                extra={"target_id": str(target.id)},
            )
        else:
            logger.info(
                "check complete - status: %s, response time: %sms, up: %s",
                result.http_status,
                result.latency_ms,
                result.is_up,
                extra={"target_id": str(target.id)},
            )

        try:
            await self._registry.insert_check_record(
                CheckRecord(
                    target_id=target.id,
                    checked_at=result.checked_at,
                    http_status=result.http_status,
                    latency_ms=result.latency_ms,
                    is_up=result.is_up,
                    error=result.error,
                )
            )
        except SQLAlchemyError:
            logger.exception("error storing check result", extra={"target_id": str(target.id)})

        await self._track_failures(target, result)
        return result

    async def send_test_alert(
        self,
        target_id: uuid.UUID,
        status: int | None = None,
        error_message: str | None = None,
    ) -> str | None:
        target = await self._registry.get_target(target_id)
        if target is None:
            raise LookupError(f"Target {target_id} does not exist")
        return await self._send_alert(target, status, error_message)

    async def _track_failures(self, target: TargetSnapshot, result: CheckResultDTO) -> None:
        decision = evaluate(target.consecutive_failures, target.active_alert, result.is_up)
        if not result.is_up:
            logger.info(
                "%s has %d consecutive failures",
                target.name,
                decision.consecutive_failures,
                extra={"target_id": str(target.id)},
            )

        if decision.should_alert:
            await self._send_alert(target, result.http_status, result.error)

        try:
            await self._registry.update_target_failure_state(
                target.id,
                decision.consecutive_failures,
                decision.active_alert,
            )
        except SQLAlchemyError:
            logger.exception("error storing failure state", extra={"target_id": str(target.id)})

    async def _send_alert(
        self,
        target: TargetSnapshot,
        status: int | None,
        error_message: str | None,
    ) -> str | None:
        logger.info("sending alert for %s after consecutive failures", target.name, extra={"target_id": str(target.id)})
        try:
            request_id = await self._alert_sender.send_down_alert(
                target.name,
                target.url,
                status=status,
                error_message=error_message,
            )
        except Exception:  # pragma: no cover - senders log their own failures
            logger.exception("error sending alert for %s", target.name, extra={"target_id": str(target.id)})
            return None

        if request_id:
            logger.info("alert sent for %s, request id %s", target.name, request_id, extra={"target_id": str(target.id)})
        else:
            logger.error("failed to send alert for %s", target.name, extra={"target_id": str(target.id)})
        return request_id
