"""ABOUTME: Per-scenario state shared between step definitions
ABOUTME: Holds the last response, the data steps set up, and the scenario's resource tracker"""

from typing import Any

import structlog

from .envelope import Envelope
from .exceptions import MissingPrecondition
from .gateway import ApiGateway
from .lifecycle import CleanupReport, ResourceTracker
from .models import UserCreateRequest, UserResponse

logger = structlog.get_logger(__name__)


class ScenarioContext:
    """
    Everything one scenario knows.

    A new context is built for every scenario around an explicitly passed
    gateway, so nothing carries over between scenarios except the service's
    own data, and the tracker deletes what this scenario created.
    """

    def __init__(self, gateway: ApiGateway, name: str = "") -> None:
        self.gateway = gateway
        self.name = name
        self.tracker = ResourceTracker(gateway.delete_user_compat, scenario=name)
        self.created_users: list[UserResponse] = []
        self.reset()

    def reset(self) -> None:
        self.response: Envelope | None = None
        self.current_user: UserResponse | None = None
        self.user_data: UserCreateRequest | None = None
        self.profile_data: UserCreateRequest | None = None
        self.last_error: dict[str, Any] | None = None

    def add_created_user(self, user: UserResponse) -> None:
        self.created_users.append(user)
        self.tracker.track(user.id, payload=user.to_json())

    def last_created_user(self) -> UserResponse | None:
        return self.created_users[-1] if self.created_users else None

    def require_user_data(self) -> UserCreateRequest:
        if self.user_data is None:
            raise MissingPrecondition("No user data set")
        return self.user_data

    def require_profile_data(self) -> UserCreateRequest:
        if self.profile_data is None:
            raise MissingPrecondition("No profile data set")
        return self.profile_data

    def require_current_user(self) -> UserResponse:
        if self.current_user is None:
            raise MissingPrecondition("No current user")
        return self.current_user

    def require_response(self) -> Envelope:
        if self.response is None:
            raise MissingPrecondition("No response available")
        return self.response

    def remember(self, envelope: Envelope) -> Envelope:
        """Make `envelope` the current response; non-2xx bodies also become `last_error`."""
        self.response = envelope
        if not envelope.ok:
            self.last_error = envelope.data if isinstance(envelope.data, dict) else {"body": envelope.data}
        return envelope

    def diagnostics(self) -> dict[str, Any]:
        return {
            "scenario": self.name,
            "last_response": self.response.to_json() if self.response is not None else None,
            "last_error": self.last_error,
        }

    async def finish(self, failed: bool = False) -> CleanupReport:
        """End of scenario: log the outcome, then clean up whatever happened."""
        if failed:
            logger.error("scenario failed", **self.diagnostics())
        else:
            logger.info("scenario passed", scenario=self.name)
        try:
            return await self.tracker.cleanup()
        finally:
            self.created_users = []
