from __future__ import annotations

import logging

import httpx

from uptime_monitor.alerts.base import AlertEvent, AlertSender
from uptime_monitor.core.config import settings

logger = logging.getLogger(__name__)


class TelegramNotifier(AlertSender):
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        bot_token: str | None = None,
        chat_id: str | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=5.0)
        self._token = bot_token if bot_token is not None else settings.telegram_bot_token
        self._chat_id = chat_id if chat_id is not None else settings.telegram_chat_id
        self._parse_mode = settings.telegram_parse_mode

    async def send_down_alert(
        self,
        target_name: str,
        url: str,
        status: int | None = None,
        error_message: str | None = None,
    ) -> str | None:
        if not self._token or not self._chat_id:
            logger.error("Telegram bot token or chat id is not configured, cannot send alert", extra={"url": url})
            return None

        event = AlertEvent(target_name=target_name, url=url, status=status, error=error_message)
        payload = {
            "chat_id": self._chat_id,
            "text": self._format_message(event),
            "parse_mode": self._parse_mode,
            "disable_web_page_preview": True,
        }
        try:
            resp = await self._client.post(
                f"https://api.telegram.org/bot{self._token}/sendMessage",
                json=payload,
            )
            resp.raise_for_status()
            message = resp.json().get("result") or {}
        except (httpx.HTTPError, ValueError):
            logger.exception("error sending alert to telegram", extra={"url": url})
            return None

        message_id = message.get("message_id")
        return str(message_id) if message_id is not None else None

    def _format_message(self, event: AlertEvent) -> str:
        status_line = f"Status: {event.status}" if event.status else "Status: no response"
        err = f"\nError: {event.error}" if event.error else ""
        # Telegram has no alias concept; the key still tags the incident
        return (
            f"Website Down: {event.target_name}\n"
            f"URL: {event.url}\n"
            f"{status_line}{err}\n"
            f"Incident: {event.dedup_key}"
        )
