"""Black-box BDD test harness for the user API.

Drives the service purely over HTTP. Every call resolves to an `Envelope`;
retries, polling and test-data cleanup live here so step definitions stay
thin.
"""

from .config import HarnessConfig
from .envelope import Envelope
from .exceptions import EnvelopeShapeError, HarnessError, MissingPrecondition, TimeoutExceeded, UnexpectedResponseBody
from .executor import RequestExecutor
from .gateway import ApiGateway
from .lifecycle import CleanupReport, ResourceTracker, TrackerState
from .polling import wait_for_condition
from .world import ScenarioContext

__all__ = [
    "ApiGateway",
    "CleanupReport",
    "Envelope",
    "EnvelopeShapeError",
    "HarnessConfig",
    "HarnessError",
    "MissingPrecondition",
    "RequestExecutor",
    "ResourceTracker",
    "ScenarioContext",
    "TimeoutExceeded",
    "TrackerState",
    "UnexpectedResponseBody",
    "wait_for_condition",
]
