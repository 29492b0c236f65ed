"""ABOUTME: Hard failures raised by the test harness
ABOUTME: Reserved for broken test contracts, never for HTTP outcomes"""

import httpx


class HarnessError(Exception):
    """Base exception for all harness errors."""


class MissingPrecondition(HarnessError):
    """A step ran without the data an earlier step should have set up."""


class TimeoutExceeded(HarnessError):
    """A polled condition never became true."""

    def __init__(self, description: str, timeout: float) -> None:
        super().__init__(f"Timeout waiting for {description} after {timeout}s")
        self.description = description
        self.timeout = timeout


class EnvelopeShapeError(HarnessError):
    """An envelope's data was read as a shape it does not have."""


class UnexpectedResponseBody(HarnessError):
    """A 2xx response whose body does not parse as the typed model."""

    def __init__(self, response: httpx.Response, what: str) -> None:
        request = response.request
        super().__init__(f"{request.method} {request.url} returned {response.status_code} without {what}")
        self.response = response
