from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential


@dataclass
class CircuitBreaker:
    """Stops calling an upstream after repeated failures until a cool-down passes."""

    max_failures: int = 3
    reset_seconds: float = 30
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    failures: int = 0
    opened_at: float | None = None

    @property
    def is_open(self) -> bool:
        if self.opened_at is None:
            return False
        if self.clock() - self.opened_at >= self.reset_seconds:
            # half-open: let one trial request through
            self.failures = self.max_failures - 1
            self.opened_at = None
            return False
        return True

    def allow(self) -> bool:
        return not self.is_open

    def record_failure(self) -> None:
        self.failures += 1
        if self.failures >= self.max_failures:
            self.opened_at = self.clock()

    def record_success(self) -> None:
        self.failures = 0
        self.opened_at = None


async def get_json(
    url: str,
    params: dict[str, Any] | None = None,
    timeout: float = 10,
    attempts: int = 3,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """GET ``url`` and decode the JSON body, retrying on httpx errors."""
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.HTTPError),
        reraise=True,
    )
    if client is not None:
        return await _get_with_retry(client, url, params, retrying)
    async with httpx.AsyncClient(timeout=timeout) as owned:
        return await _get_with_retry(owned, url, params, retrying)


async def _get_with_retry(client: httpx.AsyncClient, url: str, params, retrying: AsyncRetrying) -> Any:
    async for attempt in retrying:
        with attempt:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()
    return None
