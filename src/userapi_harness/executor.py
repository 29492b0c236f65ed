"""ABOUTME: Executes one HTTP call with retry on network failures and 5xx responses
ABOUTME: Every outcome comes back as an Envelope; client errors are never retried"""

import asyncio
from collections.abc import Awaitable, Callable

import httpx
import structlog
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_fixed

from .envelope import REQUEST_FAILURES, Envelope, envelope_from_error, envelope_from_response, is_retryable

logger = structlog.get_logger(__name__)

RequestFn = Callable[[], Awaitable[httpx.Response]]
SleepFn = Callable[[float], Awaitable[None]]


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.info(
        "retrying request",
        attempt=retry_state.attempt_number,
        delay=retry_state.upcoming_sleep,
        error=repr(error),
    )


class RequestExecutor:
    """
    Run a zero-argument request function, retrying what is worth retrying.

    The request function performs exactly one HTTP call and raises for a
    non-2xx status (httpx's `raise_for_status`). At most `retries + 1`
    attempts are made, `retry_delay` seconds apart, and only while the failure
    is retryable (see `is_retryable`). The executor holds no state between
    calls, so one instance can be shared.
    """

    def __init__(self, retries: int = 0, retry_delay: float = 1.0, sleep: SleepFn = asyncio.sleep) -> None:
        if retries < 0:
            raise ValueError("retries must not be negative")
        self.retries = retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception(is_retryable),
            before_sleep=_log_retry,
            sleep=self._sleep,
            reraise=True,
        )

    async def execute(self, request_fn: RequestFn, url: str = "") -> Envelope:
        try:
            response = await self._retrying()(request_fn)
        except REQUEST_FAILURES as error:
            envelope = envelope_from_error(error, url)
            logger.debug("request failed", url=url, status=envelope.status, error=repr(error))
            return envelope
        return envelope_from_response(response)
