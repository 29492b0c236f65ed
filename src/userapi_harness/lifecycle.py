"""ABOUTME: Tracks resources a scenario creates and deletes them when the scenario ends
ABOUTME: Cleanup fans out concurrent deletes and reports which worked without raising"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from .envelope import Envelope

logger = structlog.get_logger(__name__)

DeleteFn = Callable[[int], Awaitable[Envelope]]


class TrackerState(Enum):
    INIT = "init"
    ACTIVE = "active"
    CLEANUP = "cleanup"


@dataclass(slots=True)
class TrackedResource:
    resource_id: int
    kind: str = "user"
    scenario: str = ""
    should_cleanup: bool = True
    payload: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class CleanupReport:
    deleted: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.deleted and not self.failed


class ResourceTracker:
    """
    Owns the resources created during one scenario.

    `track()` moves the tracker from INIT to ACTIVE. `cleanup()` passes through
    CLEANUP and always ends back in INIT with nothing tracked, whatever the
    individual deletes did. Each scenario gets its own tracker.
    """

    def __init__(self, delete: DeleteFn, scenario: str = "") -> None:
        self._delete = delete
        self.scenario = scenario
        self._resources: list[TrackedResource] = []
        self._state = TrackerState.INIT

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def tracked(self) -> tuple[TrackedResource, ...]:
        return tuple(self._resources)

    def track(self, resource_id: int, kind: str = "user", payload: dict[str, Any] | None = None) -> TrackedResource:
        resource = TrackedResource(resource_id=resource_id, kind=kind, scenario=self.scenario, payload=payload)
        self._resources.append(resource)
        self._state = TrackerState.ACTIVE
        return resource

    def release(self, resource_id: int) -> None:
        """Keep tracking the resource but don't delete it at cleanup, e.g. because a step already did."""
        for resource in self._resources:
            if resource.resource_id == resource_id:
                resource.should_cleanup = False

    def _succeeded(self, resource: TrackedResource, outcome: Envelope | BaseException) -> bool:
        if isinstance(outcome, BaseException):
            logger.warning("cleanup delete raised", resource_id=resource.resource_id, error=repr(outcome))
            return False
        if outcome.status != 204:
            logger.warning("cleanup delete failed", resource_id=resource.resource_id, status=outcome.status)
            return False
        return True

    async def cleanup(self) -> CleanupReport:
        self._state = TrackerState.CLEANUP
        eligible = [resource for resource in self._resources if resource.should_cleanup]
        self._resources = []
        try:
            outcomes = await asyncio.gather(
                *(self._delete(resource.resource_id) for resource in eligible), return_exceptions=True
            )
        finally:
            self._state = TrackerState.INIT

        deleted: list[int] = []
        failed: list[int] = []
        for resource, outcome in zip(eligible, outcomes, strict=True):
            (deleted if self._succeeded(resource, outcome) else failed).append(resource.resource_id)
        report = CleanupReport(deleted=deleted, failed=failed)
        if not report.empty:
            logger.info("scenario cleanup finished", scenario=self.scenario, deleted=deleted, failed=failed)
        return report
