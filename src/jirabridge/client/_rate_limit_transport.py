"""httpx async transport wrapper that honours Jira rate limiting."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

_LOG = logging.getLogger(__name__)

_DEFAULT_RETRY_AFTER = 1.0


class RateLimitTransport(httpx.AsyncBaseTransport):
    """Pauses outgoing requests after an HTTP 429.

    The 429 response is handed back unchanged so the caller sees the failure;
    requests issued afterwards wait until ``Retry-After`` has elapsed. The
    pause is shared by **all** concurrent requests through one event.
    Nothing is retried here.
    """

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()

        self._rate_limit_lock = asyncio.Lock()
        self._rate_limit_clear = asyncio.Event()
        self._rate_limit_clear.set()
        self._rate_limit_pause_until = 0.0
        self._resume_task: asyncio.Task[None] | None = None

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await self._rate_limit_clear.wait()
        response = await self._transport.handle_async_request(request)
        if response.status_code == 429:
            retry_after = self._parse_retry_after(response)
            _LOG.warning("Jira rate limit hit; pausing requests for %.1fs", retry_after)
            await self._apply_rate_limit_pause(retry_after)
        return response

    async def aclose(self) -> None:
        if self._resume_task is not None:
            self._resume_task.cancel()
        await self._transport.aclose()

    # ------------------------------------------------------------------
    # Rate-limit helpers
    # ------------------------------------------------------------------

    async def _apply_rate_limit_pause(self, retry_after: float) -> None:
        async with self._rate_limit_lock:
            until = time.monotonic() + max(0.0, retry_after)
            if until <= self._rate_limit_pause_until:
                return
            self._rate_limit_pause_until = until
            self._rate_limit_clear.clear()
            if self._resume_task is None or self._resume_task.done():
                self._resume_task = asyncio.create_task(self._resume_when_clear())

    async def _resume_when_clear(self) -> None:
        while True:
            async with self._rate_limit_lock:
                remaining = self._rate_limit_pause_until - time.monotonic()
                if remaining <= 0:
                    self._rate_limit_clear.set()
                    return
            await asyncio.sleep(remaining)

    @staticmethod
    def _parse_retry_after(response: httpx.Response) -> float:
        raw = response.headers.get("Retry-After")
        if raw is None:
            return _DEFAULT_RETRY_AFTER
        try:
            return max(0.0, float(raw))
        except ValueError:
            return _DEFAULT_RETRY_AFTER
