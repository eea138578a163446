from __future__ import annotations

import logging
import uuid
from typing import Sequence

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_monitor.api.dependencies import get_db_session, get_directory, get_probe_executor
from uptime_monitor.api.schemas.targets import (
    AlertTestRequest,
    CheckRead,
    MessageResponse,
    TargetCreate,
    TargetRead,
    TargetUpdate,
)
from uptime_monitor.core.errors import NotInitializedError
from uptime_monitor.db.models import Target
from uptime_monitor.scheduler.directory import EntityDirectory
from uptime_monitor.services.probe import ProbeExecutor
from uptime_monitor.services.status_history import StatusHistoryService
from uptime_monitor.services.targets import TargetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/targets", tags=["targets"])


async def _get_or_404(session: AsyncSession, target_id: uuid.UUID) -> Target:
    target = await TargetService(session).get(target_id)
    if target is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target not found")
    return target


@router.get("/", response_model=Sequence[TargetRead])
async def list_targets(
    session: AsyncSession = Depends(get_db_session),
    offset: int = 0,
    limit: int = 100,
) -> Sequence[TargetRead]:
    service = TargetService(session)
    return await service.list(offset=offset, limit=limit)


@router.get("/{target_id}", response_model=TargetRead)
async def get_target(
    target_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
) -> TargetRead:
    return await _get_or_404(session, target_id)


@router.post("/", response_model=TargetRead, status_code=status.HTTP_201_CREATED)
async def create_target(
    payload: TargetCreate,
    session: AsyncSession = Depends(get_db_session),
    directory: EntityDirectory = Depends(get_directory),
) -> TargetRead:
    service = TargetService(session)
    data = payload.model_dump()
    data["url"] = str(payload.url)
    async with session.begin():
        target = await service.create(**data)
    await directory.init(target.id, target.check_interval_sec)
    return target


@router.patch("/{target_id}", response_model=TargetRead)
async def update_target(
    target_id: uuid.UUID,
    payload: TargetUpdate,
    session: AsyncSession = Depends(get_db_session),
    directory: EntityDirectory = Depends(get_directory),
) -> TargetRead:
    service = TargetService(session)
    data = payload.model_dump(exclude_unset=True)
    if data.get("url") is not None:
        data["url"] = str(payload.url)
    async with session.begin():
        target = await service.update(target_id, **data)
        if target is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target not found")

    if "check_interval_sec" in data:
        try:
            await directory.update_check_interval(target.id, target.check_interval_sec)
        except NotInitializedError:
            if target.is_running:
                logger.info("schedule entity not initialized, initializing", extra={"target_id": str(target.id)})
                await directory.init(target.id, target.check_interval_sec)
    return target


@router.delete("/{target_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_target(
    target_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    directory: EntityDirectory = Depends(get_directory),
) -> None:
    # runs even when the row is already gone
    await directory.delete(target_id)
    service = TargetService(session)
    async with session.begin():
        deleted = await service.delete(target_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target not found")
    return None


@router.post("/{target_id}/pause", response_model=MessageResponse)
async def pause_target(
    target_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    directory: EntityDirectory = Depends(get_directory),
) -> MessageResponse:
    await _get_or_404(session, target_id)
    try:
        await directory.pause(target_id)
    except NotInitializedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return MessageResponse(message="Paused monitoring")


@router.post("/{target_id}/resume", response_model=MessageResponse)
async def resume_target(
    target_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    directory: EntityDirectory = Depends(get_directory),
) -> MessageResponse:
    target = await _get_or_404(session, target_id)
    try:
        await directory.update_check_interval(target.id, target.check_interval_sec)
        await directory.resume(target.id)
    except NotInitializedError:
        logger.info("schedule entity not initialized, initializing", extra={"target_id": str(target.id)})
        await directory.init(target.id, target.check_interval_sec)
    return MessageResponse(message="Resumed monitoring")


@router.post("/{target_id}/init", response_model=MessageResponse)
async def init_target(
    target_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    directory: EntityDirectory = Depends(get_directory),
) -> MessageResponse:
    target = await _get_or_404(session, target_id)
    await directory.init(target.id, target.check_interval_sec)
    return MessageResponse(message="Initialized schedule entity")


@router.post("/{target_id}/execute-check", response_model=MessageResponse, status_code=status.HTTP_202_ACCEPTED)
async def execute_check(
    target_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
    directory: EntityDirectory = Depends(get_directory),
) -> MessageResponse:
    target = await _get_or_404(session, target_id)
    directory.execute_check(target.id)
    return MessageResponse(message="Check dispatched")


@router.post("/{target_id}/test-alert")
async def send_test_alert(
    target_id: uuid.UUID,
    payload: AlertTestRequest,
    executor: ProbeExecutor = Depends(get_probe_executor),
) -> dict:
    try:
        request_id = await executor.send_test_alert(target_id, payload.status, payload.error_message)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target not found") from exc
    return {"sent": request_id is not None, "request_id": request_id}


@router.get("/{target_id}/checks", response_model=Sequence[CheckRead])
async def list_checks(
    target_id: uuid.UUID,
    offset: int = 0,
    limit: int = 200,
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[CheckRead]:
    await _get_or_404(session, target_id)
    service = StatusHistoryService(session)
    return await service.list(target_id, offset=offset, limit=limit)


@router.get("/{target_id}/status", response_model=CheckRead | None)
async def latest_check(
    target_id: uuid.UUID,
    session: AsyncSession = Depends(get_db_session),
) -> CheckRead | None:
    await _get_or_404(session, target_id)
    return await StatusHistoryService(session).latest(target_id)
