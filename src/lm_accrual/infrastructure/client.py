"""AccrualClient — one lookup per call against the external accrual service.

GET {base_url}/api/orders/{number}
  200 -> {"order": "...", "status": "...", "accrual": 500}
  429 -> optional Retry-After (seconds); every lookup on this client pauses
         for that long, then the same request is retried, up to max_retries
  other -> AccrualServiceError

Transport errors and malformed bodies are raised as AccrualError subclasses so
the caller can drop the order for this tick with a single except clause.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from decimal import Decimal

import httpx
from pydantic import BaseModel, Field, ValidationError

from src.lm_accrual.domain.models import AccrualReport
from src.lm_common.errors import (
    AccrualPayloadError,
    AccrualRateLimitError,
    AccrualServiceError,
)
from src.lm_common.money import MAX_AMOUNT, to_amount

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 1.0


class _AccrualPayload(BaseModel):
    order: str
    status: str
    accrual: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT)


def _parse_retry_after(value: str | None) -> float:
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = int(value.strip())
    except ValueError:
        raise AccrualServiceError(f"unparseable Retry-After header {value!r}") from None
    return float(max(seconds, 0))


class AccrualClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        max_retries: int = 3,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._client = http_client
        self._owned_client = http_client is None
        self._sleep = sleep
        self._clock = clock
        self._paused_until = 0.0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
            self._owned_client = True
        return self._client

    async def aclose(self) -> None:
        if self._owned_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "AccrualClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def paused_until(self) -> float:
        return self._paused_until

    def _pause(self, seconds: float) -> None:
        self._paused_until = max(self._paused_until, self._clock() + seconds)

    async def _wait_for_pause(self) -> None:
        # Another lookup may extend the pause while this one sleeps
        while (delay := self._paused_until - self._clock()) > 0:
            await self._sleep(delay)

    async def fetch(self, order_number: str) -> AccrualReport:
        client = self._get_client()
        attempts = self._max_retries + 1

        for attempt in range(1, attempts + 1):
            await self._wait_for_pause()
            try:
                response = await client.get(f"/api/orders/{order_number}")
            except httpx.HTTPError as exc:
                raise AccrualServiceError(f"{type(exc).__name__}: {exc}") from exc

            if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
                delay = _parse_retry_after(response.headers.get("Retry-After"))
                self._pause(delay)
                logger.info(
                    "Accrual service rate limited order %s, pausing %.0fs (attempt %d/%d)",
                    order_number, delay, attempt, attempts,
                )
                continue

            if response.status_code != httpx.codes.OK:
                raise AccrualServiceError(
                    f"status {response.status_code} for order {order_number}"
                )
            return self._parse_report(order_number, response)

        raise AccrualRateLimitError(attempts)

    @staticmethod
    def _parse_report(order_number: str, response: httpx.Response) -> AccrualReport:
        try:
            payload = _AccrualPayload.model_validate_json(response.content)
        except ValidationError as exc:
            first = exc.errors()[0]
            raise AccrualPayloadError(f"{first['type']} at {first['loc']}") from exc
        if payload.order != order_number:
            raise AccrualPayloadError(f"expected order {order_number}, got {payload.order}")
        accrual = None
        if payload.accrual is not None:
            try:
                accrual = to_amount(payload.accrual)
            except (ValueError, ArithmeticError) as exc:
                raise AccrualPayloadError(f"accrual out of range: {payload.accrual}") from exc
        return AccrualReport(
            order_number=payload.order,
            status=payload.status,
            accrual=accrual,
        )
