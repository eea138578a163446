from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = "INFO"
    checker_concurrency: int = Field(default=20, ge=1)
    shutdown_grace_sec: float = Field(default=10.0, ge=0)
    alert_provider: Literal["opsgenie", "telegram"] = "opsgenie"
    opsgenie_api_key: str | None = None
    opsgenie_api_url: str = "https://api.opsgenie.com/v2/alerts"
    telegram_bot_token: str | None = None
    telegram_chat_id: str | None = None
    telegram_parse_mode: str = "Markdown"

    # ENV-only configuration
    model_config = SettingsConfigDict(env_prefix="")


settings = Settings()
