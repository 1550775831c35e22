"""httpx async transport wrapper with opt-in retry and rate-limit pauses."""

from __future__ import annotations

import asyncio
import logging
import random
import time

import httpx

_LOG = logging.getLogger(__name__)

# Status codes considered transient and eligible for retry.
_RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


class RetryingTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx async transport with retry on transient failures.

    ``max_retries`` defaults to 0: every request is sent once and its result,
    successful or not, is returned to the caller. When retries are enabled:

    - transport errors and 502/503/504 are retried with capped exponential
      backoff plus jitter;
    - HTTP 429 pauses **all** requests through this transport until the
      ``Retry-After`` delay has elapsed, then retries.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 0,
        backoff_cap: float = 4.0,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries
        self._backoff_cap = backoff_cap

        self._rate_limit_lock = asyncio.Lock()
        self._rate_limit_clear = asyncio.Event()
        self._rate_limit_clear.set()
        self._rate_limit_pause_until = 0.0

    @property
    def max_retries(self) -> int:
        return self._max_retries

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            await self._rate_limit_clear.wait()
            can_retry = attempt < self._max_retries

            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError:
                if not can_retry:
                    raise
                await self._sleep_backoff(request, attempt)
                attempt += 1
                continue

            if response.status_code not in _RETRYABLE_STATUS_CODES or not can_retry:
                return response

            await response.aclose()
            retry_after = self._parse_retry_after(response)
            if response.status_code == 429:
                await self._apply_rate_limit_pause(retry_after)
            elif retry_after > 0:
                await asyncio.sleep(retry_after)
            await self._sleep_backoff(request, attempt)
            attempt += 1

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _apply_rate_limit_pause(self, retry_after: float) -> None:
        now = time.monotonic()
        async with self._rate_limit_lock:
            until = now + max(0.0, retry_after)
            if until <= self._rate_limit_pause_until:
                return
            self._rate_limit_pause_until = until
            self._rate_limit_clear.clear()

        await asyncio.sleep(max(0.0, self._rate_limit_pause_until - time.monotonic()))

        async with self._rate_limit_lock:
            if time.monotonic() >= self._rate_limit_pause_until:
                self._rate_limit_clear.set()

    @staticmethod
    def _parse_retry_after(response: httpx.Response) -> float:
        raw = response.headers.get("Retry-After")
        if raw is None:
            return 0.0
        try:
            return max(0.0, float(raw))
        except ValueError:
            return 0.0

    async def _sleep_backoff(self, request: httpx.Request, attempt: int) -> None:
        seconds = min(self._backoff_cap, float(2**attempt)) + random.uniform(0.0, 0.25)
        _LOG.warning(
            "Retrying %s %s (attempt %d of %d)", request.method, request.url.path, attempt + 1, self._max_retries
        )
        await asyncio.sleep(seconds)
