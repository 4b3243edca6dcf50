"""Async HTTP plumbing for registry traffic.

``RegistryHttpClient`` wraps ``httpx.AsyncClient`` with three guards:

- a shared token bucket (``RateLimiter``) so concurrent workers stay under
  the configured request rate;
- retries with backoff for 429, 5xx and connection failures
  (``RetryPolicy``);
- a hard deadline per call covering every retry and rate-limit wait, so a
  hung registry never stalls a worker forever.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from peercompat.utils.logging import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """Token bucket shared by all workers of a run."""

    def __init__(self, rate: float, burst: int = 1) -> None:
        """Initialize the bucket.

        Args:
            rate: Tokens added per second.
            burst: Bucket capacity.
        """
        self.rate = rate
        self.burst = max(burst, 1)
        self.tokens = float(self.burst)
        self.last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.burst, self.tokens + (now - self.last_refill) * self.rate)
        self.last_refill = now

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available."""
        async with self._lock:
            self._refill()
            if self.tokens < 1:
                wait = (1 - self.tokens) / self.rate
                logger.debug("Registry rate limit reached, waiting %.2fs", wait)
                await asyncio.sleep(wait)
                self._refill()
            self.tokens -= 1


@dataclass
class RetryPolicy:
    """When and how long to back off before retrying a registry call."""

    max_retries: int = 3
    delays: list[float] = field(default_factory=lambda: [1.0, 2.0, 4.0])

    def delay(self, attempt: int) -> float:
        return self.delays[min(attempt, len(self.delays) - 1)]

    def can_retry(self, attempt: int) -> bool:
        return attempt < self.max_retries


class DeadlineExceeded(Exception):
    """A call (retries included) outlived its deadline."""

    def __init__(self, url: str, deadline: float) -> None:
        self.url = url
        self.deadline = deadline
        super().__init__(f"Request to {url} exceeded deadline of {deadline:.1f}s")


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After", "")
    return float(value) if value.isdigit() else None


class RegistryHttpClient:
    """JSON-over-HTTP client used by the registry layer.

    Must be used as an async context manager; the underlying connection pool
    is opened on entry and closed on exit.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        retry: RetryPolicy | None = None,
        deadline: float | None = None,
        rate_limiter: RateLimiter | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Registry root URL.
            timeout: Socket timeout in seconds.
            retry: Retry policy (defaults to three retries).
            deadline: Upper bound in seconds for one call; None disables it.
            rate_limiter: Optional shared rate limiter.
            headers: Headers sent with every request.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url
        self.timeout = timeout
        self.retry = retry or RetryPolicy()
        self.deadline = deadline
        self.rate_limiter = rate_limiter
        self.headers = headers or {}
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "RegistryHttpClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self.headers,
            follow_redirects=True,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("HTTP client not initialized. Use async with statement.")
        return self._client

    async def _send(self, url: str) -> httpx.Response:
        """GET with retries on 429, 5xx and connection failures.

        Raises:
            httpx.HTTPStatusError: For 4xx answers, or 5xx once retries run out.
            httpx.TransportError: When the connection keeps failing.
        """
        attempt = 0
        while True:
            if self.rate_limiter:
                await self.rate_limiter.acquire()

            try:
                response = await self.client.get(url)
            except (httpx.ConnectError, httpx.ReadTimeout) as e:
                if not self.retry.can_retry(attempt):
                    raise
                wait = self.retry.delay(attempt)
                logger.warning("Connection error on %s, retrying in %.1fs: %s", url, wait, e)
            else:
                status = response.status_code
                if status != 429 and status < 500:
                    response.raise_for_status()
                    return response
                if not self.retry.can_retry(attempt):
                    response.raise_for_status()
                if status == 429:
                    wait = _retry_after(response) or self.retry.delay(attempt)
                    logger.warning("Registry rate limited (429) on %s, waiting %.1fs", url, wait)
                else:
                    wait = self.retry.delay(attempt)
                    logger.warning("Registry error %d on %s, retrying in %.1fs", status, url, wait)

            await asyncio.sleep(wait)
            attempt += 1

    async def get_json(self, url: str) -> Any:
        """GET a URL under the configured deadline and decode the JSON body.

        Raises:
            DeadlineExceeded: If the deadline elapses first.
            httpx.HTTPError: On HTTP or transport failure.
            ValueError: If the body is not valid JSON.
        """
        if self.deadline is None:
            response = await self._send(url)
        else:
            try:
                response = await asyncio.wait_for(self._send(url), timeout=self.deadline)
            except asyncio.TimeoutError as e:
                raise DeadlineExceeded(url, self.deadline) from e
        return response.json()


def create_registry_rate_limiter(requests_per_second: float) -> RateLimiter | None:
    """Build the shared limiter for a run; 0 means unlimited."""
    if requests_per_second <= 0:
        return None
    return RateLimiter(rate=requests_per_second, burst=max(int(requests_per_second), 1))
