from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class AlertEvent:
    target_name: str
    url: str
    status: int | None = None
    error: str | None = None

    @property
    def dedup_key(self) -> str:
        return dedup_alias(self.url)

    @property
    def description(self) -> str:
        if self.status:
            return f"Website {self.target_name} ({self.url}) is down with status code {self.status}."
        return f"Website {self.target_name} ({self.url}) is down. {self.error or ''}".rstrip()


def dedup_alias(url: str) -> str:
    """Stable per-url key so repeated sends collapse into one provider-side incident."""
    return "website-down-" + re.sub(r"[^a-zA-Z0-9]", "-", url)


class AlertSender(Protocol):
    async def send_down_alert(
        self,
        target_name: str,
        url: str,
        status: int | None = None,
        error_message: str | None = None,
    ) -> str | None:  # pragma: no cover - interface
        """Return the provider request id, or None when the alert was not accepted."""
        ...
