import asyncio
import time

import httpx

from treasuryscan.exceptions import ExternalServiceError

_RETRIABLE_STATUS = {429, 500, 502, 503, 504}


class RateLimitedClient:
    """Async HTTP client with interval-based rate limiting for a single RPC endpoint.

    Transport failures and retriable HTTP statuses are raised as ExternalServiceError
    so callers can retry on one exception type.
    """

    def __init__(self, rate_per_second: float = 5.0, timeout: float = 30.0) -> None:
        if rate_per_second <= 0:
            raise ValueError(f"rate_per_second must be > 0, got {rate_per_second}")
        self._min_interval = 1.0 / rate_per_second
        self._last_request_time = 0.0
        self._lock = asyncio.Lock()
        self._client = httpx.AsyncClient(timeout=timeout, headers={"content-type": "application/json"})

    async def _wait_for_slot(self) -> None:
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()

    async def post(self, url: str, json: dict | list | None = None) -> httpx.Response:
        await self._wait_for_slot()
        try:
            resp = await self._client.post(url, json=json)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"POST {url} failed: {e!r}") from e

        if resp.status_code in _RETRIABLE_STATUS:
            raise ExternalServiceError(f"POST {url} returned HTTP {resp.status_code}")
        if resp.status_code >= 400:
            raise ExternalServiceError(f"POST {url} rejected with HTTP {resp.status_code}: {resp.text[:200]}")
        return resp

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RateLimitedClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
