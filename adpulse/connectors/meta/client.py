"""ADPULSE — Meta API Client.

Handles retry logic, rate limiting, and pagination.

Meta rarely answers with HTTP 429. Throttling, auth failures and "reduce the
amount of data" rejections all arrive as JSON error envelopes, so every
response body is parsed and classified before the status code is trusted.
"""

import asyncio
import random
import time
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

import httpx

from adpulse.config import settings
from adpulse.connectors.meta.classifier import (
    UNPARSEABLE,
    ClassifierConfig,
    classify_response,
)
from adpulse.connectors.meta.endpoints import RequestDescriptor
from adpulse.core.errors import (
    DeadlineExceededError,
    ErrorKind,
    MetaAPIError,
    NetworkTransient,
    RateLimit,
    describe_kind,
)
from adpulse.core.logging import get_logger, redact_url

logger = get_logger("meta.client")

SleepFunc = Callable[[float], Awaitable[None]]
PageExtractor = Callable[[Any], Tuple[Sequence[Any], Optional[str]]]


def graph_page(body: Any) -> Tuple[Sequence[Any], Optional[str]]:
    """Default extractor for ``{data: [...], paging: {next}}`` pages."""
    if not isinstance(body, dict):
        return [], None
    data = body.get("data") or []
    paging = body.get("paging") or {}
    return data, paging.get("next")


class MetaClient:
    """Async HTTP client for Meta Marketing API."""

    def __init__(
        self,
        access_token: str | None = None,
        ad_account_id: str | None = None,
        *,
        classifier: ClassifierConfig | None = None,
        max_retries: int | None = None,
        backoff_cap: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFunc | None = None,
        clock: Callable[[], float] | None = None,
        jitter: Callable[[], float] | None = None,
    ):
        self.access_token = access_token or settings.fb_access_token
        self.ad_account_id = ad_account_id or settings.fb_account_id
        self.classifier = classifier or ClassifierConfig.from_settings()
        self.max_retries = max_retries or settings.max_retries
        self.backoff_cap = backoff_cap if backoff_cap is not None else settings.backoff_cap_seconds
        self.clock = clock or time.monotonic
        self._sleep_impl = sleep or asyncio.sleep
        self._jitter = jitter or random.random
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._deadline_seconds: Optional[float] = None
        self._deadline_at: Optional[float] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=settings.http_timeout_seconds, transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "MetaClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ── Timed Waits ──

    def start_deadline(self, seconds: float | None) -> None:
        """Bound the total time this client may spend on requests and timed waits."""
        self._deadline_seconds = seconds
        self._deadline_at = None if seconds is None else self.clock() + seconds

    def check_deadline(self) -> None:
        if self._deadline_at is not None and self.clock() >= self._deadline_at:
            raise DeadlineExceededError(self._deadline_seconds or 0.0)

    async def sleep(self, seconds: float) -> None:
        """Suspend the current task, honouring the overall deadline if set."""
        if self._deadline_at is not None and self.clock() + seconds > self._deadline_at:
            raise DeadlineExceededError(self._deadline_seconds or 0.0, seconds)
        await self._sleep_impl(seconds)

    def backoff_delay(self, attempt: int) -> float:
        """Exponential backoff (2^attempt s, capped) plus 0–1s additive jitter."""
        return min(2**attempt, self.backoff_cap) + self._jitter()

    # ── Core Request Method ──

    async def execute(self, request: RequestDescriptor) -> Any:
        """Issue ``request`` with retry + rate-limit handling; return the parsed body."""
        client = await self._get_client()
        endpoint = redact_url(request.url)
        last_error: Optional[ErrorKind] = None

        for attempt in range(1, self.max_retries + 1):
            self.check_deadline()
            status_code: Optional[int] = None
            try:
                resp = await client.request(
                    request.method,
                    request.url,
                    params=dict(request.params) if request.params else None,
                    json=dict(request.body) if request.body else None,
                )
            except httpx.RequestError as e:
                kind: ErrorKind = NetworkTransient(str(e) or type(e).__name__)
            else:
                try:
                    body = resp.json()
                except ValueError:
                    body = UNPARSEABLE
                status_code = resp.status_code
                classified = classify_response(
                    resp.status_code, body, resp.headers, self.classifier
                )
                if classified is None:
                    return body
                kind = classified

            last_error = kind
            if not kind.retryable:
                raise MetaAPIError(kind, attempts=attempt)

            if attempt == self.max_retries:
                break

            if isinstance(kind, RateLimit):
                wait = kind.wait_ms / 1000
            else:
                wait = self.backoff_delay(attempt)
            logger.warning(
                f"{describe_kind(kind)}. Retrying in {wait:.1f}s "
                f"(attempt {attempt}/{self.max_retries})",
                extra={
                    "endpoint": endpoint,
                    "attempt": attempt,
                    "wait_ms": int(wait * 1000),
                    "status_code": status_code,
                },
            )
            await self.sleep(wait)

        assert last_error is not None
        raise MetaAPIError(last_error, attempts=self.max_retries, retries_exhausted=True)

    # ── Pagination ──

    async def paginate(
        self,
        request: RequestDescriptor,
        extractor: PageExtractor = graph_page,
    ) -> List[Any]:
        """Follow cursor links from ``request`` until ``next`` is absent.

        Pages are concatenated in arrival order; rows repeated across pages
        are kept.
        """
        all_data: List[Any] = []
        current = request
        page = 0
        endpoint = redact_url(request.url)

        while True:
            page += 1
            body = await self.execute(current)
            items, next_url = extractor(body)
            all_data.extend(items)
            logger.info(
                f"Page {page}: received {len(items)} rows (total so far: {len(all_data)})",
                extra={"endpoint": endpoint, "page": page},
            )

            if not next_url:
                break
            current = request.with_url(next_url)

        logger.info(f"Fetched {len(all_data)} records from {endpoint}")
        return all_data
