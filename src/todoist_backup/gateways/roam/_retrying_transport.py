"""Retry policy for Roam backend API requests."""

from __future__ import annotations

import asyncio
import logging
import random

import httpx

logger = logging.getLogger(__name__)

# Roam answers request bursts with 429 and peer hand-offs with 5xx.
RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


def retry_after_seconds(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


class RetryingTransport(httpx.AsyncBaseTransport):
    """Retry transient Roam failures on the wrapped transport.

    The gateway sends one request at a time, so a retry only ever delays the
    request that failed. The wait is the exponential backoff or the server's
    ``Retry-After``, whichever is longer. Redirects to a graph peer and
    non-transient errors are handed back untouched.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
        backoff_cap: float = 4.0,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries
        self._backoff_cap = backoff_cap

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError as exc:
                if attempt >= self._max_retries:
                    raise
                await self._sleep_backoff(attempt, request, type(exc).__name__)
            else:
                if response.status_code not in RETRYABLE_STATUS_CODES or attempt >= self._max_retries:
                    return response
                await response.aclose()
                await self._sleep_backoff(
                    attempt, request, f"HTTP {response.status_code}", retry_after_seconds(response)
                )
            attempt += 1

    async def aclose(self) -> None:
        await self._transport.aclose()

    def backoff_delay(self, attempt: int, retry_after: float | None = None) -> float:
        delay = min(self._backoff_cap, float(2**attempt)) + random.uniform(0.0, 0.25)
        if retry_after is None:
            return delay
        return max(delay, retry_after)

    async def _sleep_backoff(
        self,
        attempt: int,
        request: httpx.Request,
        reason: str,
        retry_after: float | None = None,
    ) -> None:
        delay = self.backoff_delay(attempt, retry_after)
        logger.warning(
            "Roam %s failed (%s), retry %d of %d in %.1fs",
            request.url.path,
            reason,
            attempt + 1,
            self._max_retries,
            delay,
        )
        await asyncio.sleep(delay)
