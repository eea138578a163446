from __future__ import annotations

import logging

import httpx

from uptime_monitor.alerts.base import AlertEvent, AlertSender
from uptime_monitor.core.config import settings

logger = logging.getLogger(__name__)


class OpsgenieNotifier(AlertSender):
    """Creates Opsgenie alerts through the v2 alert API.

    See https://docs.opsgenie.com/docs/alert-api
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        api_key: str | None = None,
        api_url: str | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=10.0)
        self._api_key = api_key if api_key is not None else settings.opsgenie_api_key
        self._api_url = api_url or settings.opsgenie_api_url

    async def send_down_alert(
        self,
        target_name: str,
        url: str,
        status: int | None = None,
        error_message: str | None = None,
    ) -> str | None:
        if not self._api_key:
            logger.error("OPSGENIE_API_KEY is not set, cannot send alert", extra={"url": url})
            return None

        event = AlertEvent(target_name=target_name, url=url, status=status, error=error_message)
        try:
            resp = await self._client.post(
                self._api_url,
                json=self._build_payload(event),
                headers={"Authorization": f"GenieKey {self._api_key}"},
            )
        except httpx.HTTPError:
            logger.exception("error sending alert to opsgenie", extra={"url": url})
            return None

        if resp.is_error:
            logger.error(
                "opsgenie api error (%s): %s",
                resp.status_code,
                resp.text,
                extra={"url": url},
            )
            return None

        try:
            return resp.json().get("requestId")
        except ValueError:
            logger.error("opsgenie returned a non-json body: %s", resp.text, extra={"url": url})
            return None

    def _build_payload(self, event: AlertEvent) -> dict:
        return {
            "message": f"Website Down: {event.target_name}",
            "description": event.description,
            "alias": event.dedup_key,
            "priority": "P2",
            "tags": ["uptime-monitor", "downtime"],
            "entity": event.url,
            "source": "Uptime Monitor",
            "details": {
                "website": event.target_name,
                "url": event.url,
                "status": str(event.status) if event.status else "N/A",
                "error": event.error or "",
            },
        }
