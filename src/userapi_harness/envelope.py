"""ABOUTME: The normalized {status, data, headers} envelope around every HTTP outcome
ABOUTME: Builds envelopes from responses and from failures, and classifies failures for retry"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeVar

import httpx

from .exceptions import EnvelopeShapeError
from .models import ErrorPayload, HealthResponse, ProfileValidationResponse, UserResponse

T = TypeVar("T")

NETWORK_ERROR = "Network Error"
REQUEST_ERROR = "Request Error"

# transport errors raised before anything reached the wire
REQUEST_SETUP_ERRORS = (httpx.UnsupportedProtocol, httpx.LocalProtocolError)


@dataclass(frozen=True, slots=True)
class Envelope:
    """
    One HTTP outcome, success or failure.

    `data` holds the decoded JSON body exactly as the service sent it. A
    `status` of 0 means no HTTP response was received; `data` is then a
    synthesized error payload. The typed views (`user()`, `users()`,
    `health()`, `validation()`, `error`) read `data` as one endpoint's shape.
    """

    status: int
    data: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def transport_failed(self) -> bool:
        return self.status == 0

    @property
    def error(self) -> ErrorPayload | None:
        """The error payload, or None for a success or a body that isn't one."""
        if self.ok or not isinstance(self.data, dict):
            return None
        try:
            return ErrorPayload.from_json(self.data)
        except (KeyError, TypeError, ValueError):
            return None

    def _view(self, parse: Callable[[Any], T], what: str) -> T:
        if not self.ok:
            raise EnvelopeShapeError(f"Expected {what} but got status {self.status}: {self.data!r}")
        try:
            return parse(self.data)
        except (KeyError, TypeError, ValueError, AttributeError) as error:
            raise EnvelopeShapeError(f"Response body is not {what}: {self.data!r}") from error

    def user(self) -> UserResponse:
        return self._view(UserResponse.from_json, "a user")

    def users(self) -> list[UserResponse]:
        def parse(data: Any) -> list[UserResponse]:
            if not isinstance(data, list):
                raise TypeError("not a list")
            return [UserResponse.from_json(item) for item in data]

        return self._view(parse, "a list of users")

    def health(self) -> HealthResponse:
        return self._view(HealthResponse.from_json, "a health report")

    def validation(self) -> ProfileValidationResponse:
        return self._view(ProfileValidationResponse.from_json, "a profile validation result")

    def to_json(self) -> dict[str, Any]:
        return {"status": self.status, "data": self.data, "headers": dict(self.headers)}


def flatten_headers(headers: httpx.Headers | dict[str, Any] | None) -> dict[str, str]:
    return {str(key): str(value) for key, value in (headers or {}).items() if value is not None}


def decode_body(response: httpx.Response) -> Any:
    """JSON when the body parses as JSON, text otherwise, None when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def envelope_from_response(response: httpx.Response) -> Envelope:
    return Envelope(
        status=response.status_code,
        data=decode_body(response),
        headers=flatten_headers(response.headers),
    )


def _request_url(exc: BaseException) -> str:
    if isinstance(exc, httpx.RequestError | httpx.HTTPStatusError):
        try:
            return str(exc.request.url)
        except RuntimeError:
            # raised by httpx when the request was never attached
            return ""
    return ""


def synthesized_error(error: str, message: str, path: str) -> Envelope:
    payload = ErrorPayload(
        timestamp=datetime.now(UTC).isoformat(),
        status=0,
        error=error,
        message=message,
        path=path or "unknown",
    )
    return Envelope(status=0, data=payload.to_json(), headers={})


def is_network_error(exc: BaseException) -> bool:
    """True when the request was sent (or attempted) but no response came back."""
    return isinstance(exc, httpx.TransportError) and not isinstance(exc, REQUEST_SETUP_ERRORS)


def envelope_from_error(exc: BaseException, url: str = "") -> Envelope:
    """
    Convert a failed call into an envelope.

    There are three buckets: the server answered with an error status (status
    and body preserved), the request went out but nothing came back (status 0,
    "Network Error"), or the request could not be built or sent at all
    (status 0, "Request Error").
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return envelope_from_response(exc.response)

    path = _request_url(exc) or url
    if is_network_error(exc):
        return synthesized_error(NETWORK_ERROR, "No response received from server", path)
    return synthesized_error(REQUEST_ERROR, str(exc) or "Unknown error occurred", path)


def is_retryable(exc: BaseException) -> bool:
    """Network failures and 5xx responses are worth another attempt; everything else is final."""
    if isinstance(exc, httpx.HTTPStatusError):
        return 500 <= exc.response.status_code < 600
    return is_network_error(exc)


# what a request function may raise that still counts as an HTTP outcome
REQUEST_FAILURES = (httpx.HTTPError, httpx.InvalidURL, ValueError, TypeError)
