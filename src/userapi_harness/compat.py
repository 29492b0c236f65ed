"""ABOUTME: Bridges the typed client to the untyped envelope shape the step definitions use
ABOUTME: Success and failure both resolve to an Envelope; nothing HTTP-related is raised"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec

import structlog

from .envelope import REQUEST_FAILURES, Envelope, envelope_from_error, envelope_from_response
from .exceptions import UnexpectedResponseBody
from .models import TypedResponse

logger = structlog.get_logger(__name__)

P = ParamSpec("P")


def to_untyped(data: Any) -> Any:
    """Turn typed models back into the plain JSON the service sent."""
    if isinstance(data, list):
        return [to_untyped(item) for item in data]
    if hasattr(data, "to_json"):
        return data.to_json()
    return data


async def call_compat(operation: Awaitable[TypedResponse[Any]]) -> Envelope:
    """
    Await a typed call and report its outcome as an envelope.

    Whenever the server answered, the envelope carries its status and body as
    sent, including 2xx bodies the typed models could not parse.
    """
    try:
        response = await operation
    except UnexpectedResponseBody as error:
        logger.debug("typed call got an unexpected body", status=error.response.status_code)
        return envelope_from_response(error.response)
    except REQUEST_FAILURES as error:
        envelope = envelope_from_error(error)
        logger.debug("typed call failed", status=envelope.status, error=repr(error))
        return envelope
    if response.raw is not None:
        return envelope_from_response(response.raw)
    return Envelope(status=response.status, data=to_untyped(response.data), headers=dict(response.headers))


def compat(method: Callable[P, Awaitable[TypedResponse[Any]]]) -> Callable[P, Awaitable[Envelope]]:
    """Wrap a coroutine returning a TypedResponse so it returns an Envelope instead."""

    @functools.wraps(method)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> Envelope:
        return await call_compat(method(*args, **kwargs))

    return wrapper
