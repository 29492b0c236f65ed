"""ABOUTME: Polls an async predicate until it returns something truthy or time runs out
ABOUTME: Errors raised by the predicate count as a falsy poll, polling carries on"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    retry_if_result,
    stop_after_delay,
    wait_fixed,
)

from .exceptions import TimeoutExceeded

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _is_falsy(result: object) -> bool:
    return not result


async def wait_for_condition(
    condition: Callable[[], Awaitable[T]],
    timeout: float = 30.0,
    interval: float = 1.0,
    description: str = "condition",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Call `condition` every `interval` seconds and return its first truthy result.

    An exception raised by `condition` is logged and treated as a falsy
    result, so one failed call (a dropped connection while the service
    restarts, say) does not abort the wait. Raises `TimeoutExceeded` once
    `timeout` seconds have passed without a truthy result. A call that is
    already in flight when the deadline passes is allowed to finish.
    """

    def log_attempt(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        if outcome is not None and outcome.failed:
            logger.debug(
                "poll raised, treating as not ready",
                description=description,
                attempt=retry_state.attempt_number,
                error=repr(outcome.exception()),
            )
        else:
            logger.debug("poll not ready", description=description, attempt=retry_state.attempt_number)

    retrying = AsyncRetrying(
        stop=stop_after_delay(timeout),
        wait=wait_fixed(interval),
        retry=retry_if_exception_type() | retry_if_result(_is_falsy),
        before_sleep=log_attempt,
        sleep=sleep,
    )
    try:
        return await retrying(condition)
    except RetryError as error:
        logger.warning(
            "timed out waiting",
            description=description,
            timeout=timeout,
            attempts=error.last_attempt.attempt_number,
        )
        raise TimeoutExceeded(description, timeout) from None
