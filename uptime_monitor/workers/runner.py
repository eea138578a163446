from __future__ import annotations

import logging
from dataclasses import dataclass

import uvicorn
from sqlalchemy.ext.asyncio import async_sessionmaker

from uptime_monitor.alerts.base import AlertSender
from uptime_monitor.alerts.opsgenie import OpsgenieNotifier
from uptime_monitor.alerts.telegram import TelegramNotifier
from uptime_monitor.core.config import settings
from uptime_monitor.db.session import SessionLocal
from uptime_monitor.scheduler.directory import EntityDirectory
from uptime_monitor.scheduler.state_store import EntityStateStore
from uptime_monitor.scheduler.supervisor import TaskSupervisor
from uptime_monitor.services.checker import Checker
from uptime_monitor.services.probe import ProbeExecutor
from uptime_monitor.services.registry import Registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulerRuntime:
    directory: EntityDirectory
    executor: ProbeExecutor
    supervisor: TaskSupervisor


def build_alert_sender() -> AlertSender:
    if settings.alert_provider == "telegram":
        return TelegramNotifier()
    return OpsgenieNotifier()


def build_runtime(
    session_factory: async_sessionmaker = SessionLocal,
    alert_sender: AlertSender | None = None,
    checker: Checker | None = None,
) -> SchedulerRuntime:
    registry = Registry(session_factory)
    supervisor = TaskSupervisor(settings.checker_concurrency)
    executor = ProbeExecutor(
        registry=registry,
        alert_sender=alert_sender or build_alert_sender(),
        supervisor=supervisor,
        checker=checker,
    )
    directory = EntityDirectory(
        store=EntityStateStore(session_factory),
        registry=registry,
        executor=executor,
        supervisor=supervisor,
    )
    return SchedulerRuntime(directory=directory, executor=executor, supervisor=supervisor)


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("starting uptime monitor on %s:%d", settings.api_host, settings.api_port)
    uvicorn.run(
        "uptime_monitor.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
