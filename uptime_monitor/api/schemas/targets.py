from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class TargetBase(BaseModel):
    name: str = Field(..., max_length=255)
    url: HttpUrl = Field(...)
    check_interval_sec: int = Field(..., ge=1)
    expected_status_code: int | None = Field(default=None, ge=100, le=599)


class TargetCreate(TargetBase):
    pass


class TargetUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    url: HttpUrl | None = None
    check_interval_sec: int | None = Field(default=None, ge=1)
    expected_status_code: int | None = Field(default=None, ge=100, le=599)
    consecutive_failures: int | None = Field(default=None, ge=0)
    active_alert: bool | None = None


class TargetRead(BaseModel):
    id: uuid.UUID
    name: str
    url: str
    check_interval_sec: int
    expected_status_code: int | None
    is_running: bool
    consecutive_failures: int
    active_alert: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CheckRead(BaseModel):
    id: uuid.UUID
    target_id: uuid.UUID
    checked_at: datetime
    http_status: int | None
    latency_ms: int | None
    is_up: bool
    error: str | None

    model_config = ConfigDict(from_attributes=True)


class AlertTestRequest(BaseModel):
    status: int | None = Field(default=None, ge=100, le=599)
    error_message: str | None = None


class MessageResponse(BaseModel):
    message: str
