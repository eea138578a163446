from __future__ import annotations

import asyncio
import socket
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

import httpx

NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


@dataclass(frozen=True)
class CheckRequest:
    target_id: str
    url: str
    expected_status_code: int | None = None


@dataclass(frozen=True)
class CheckResultDTO:
    target_id: str
    is_up: bool
    http_status: int | None
    latency_ms: int
    error: str | None
    checked_at: datetime


def is_expected_status(status_code: int, expected_status_code: int | None) -> bool:
    if expected_status_code is not None:
        return status_code == expected_status_code
    return 200 <= status_code < 400


class Checker:
    """Performs a single HTTP GET against a target and classifies the outcome.

    Transport failures never escape: they come back as a DOWN result with the
    error captured. No timeout is passed per request, so the client's own
    default applies.
    """

    def __init__(
        self,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(follow_redirects=True, headers=NO_CACHE_HEADERS)
        )

    async def check(self, req: CheckRequest) -> CheckResultDTO:
        http_status: int | None = None
        error: str | None = None
        is_up = False
        loop = asyncio.get_running_loop()
        started = loop.time()

        async with self._client_factory() as client:
            try:
                response = await client.get(req.url)
                http_status = response.status_code
                is_up = is_expected_status(response.status_code, req.expected_status_code)
            except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
                error = _normalize_error(exc)

        latency_ms = int((loop.time() - started) * 1000)

        return CheckResultDTO(
            target_id=req.target_id,
            is_up=is_up,
            http_status=http_status,
            latency_ms=latency_ms,
            error=error,
            checked_at=datetime.now(timezone.utc),
        )


def _normalize_error(exc: Exception) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return "timeout"
    if isinstance(exc, httpx.ConnectError):
        return f"connect_error: {exc}" if str(exc) else "connect_error"
    if isinstance(exc, httpx.TransportError):
        return exc.__class__.__name__.lower()
    if isinstance(exc, socket.gaierror):
        return "dns_error"
    return str(exc) or exc.__class__.__name__
