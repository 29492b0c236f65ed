"""ABOUTME: Fluent request builders used for test setup, waiting and querying
ABOUTME: Every call goes through the retrying executor and comes back as an Envelope"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Self, TypeVar

import httpx
import structlog

from .config import HarnessConfig
from .envelope import Envelope
from .exceptions import HarnessError
from .executor import RequestExecutor, SleepFn
from .lifecycle import CleanupReport
from .models import HealthStatus, UserCreateRequest, UserResponse
from .polling import wait_for_condition

logger = structlog.get_logger(__name__)

T = TypeVar("T")

USERS_PATH = "/api/users"
HEALTH_PATH = "/actuator/health"


class RequestBuilder:
    """
    Shared plumbing for the builders: per-builder headers, timeout and retry
    settings over an `httpx.AsyncClient` that the caller owns.

    The `with_*` methods change this builder in place and return it, so they
    chain.
    """

    def __init__(self, config: HarnessConfig, http: httpx.AsyncClient, sleep: SleepFn = asyncio.sleep) -> None:
        self._http = http
        self._sleep = sleep
        self.timeout = config.timeout
        self.headers = {"Content-Type": "application/json", **config.headers}
        self.executor = RequestExecutor(config.retries, config.retry_delay, sleep=sleep)

    def with_timeout(self, timeout: float) -> Self:
        self.timeout = timeout
        return self

    def with_retry(self, retries: int, retry_delay: float = 1.0) -> Self:
        self.executor = RequestExecutor(retries, retry_delay, sleep=self._sleep)
        return self

    def with_headers(self, headers: dict[str, str]) -> Self:
        self.headers = {**self.headers, **headers}
        return self

    def with_auth(self, token: str) -> Self:
        return self.with_headers({"Authorization": f"Bearer {token}"})

    async def _send(self, method: str, url: str, timeout: float | None = None, **kwargs: Any) -> httpx.Response:
        response = await self._http.request(
            method, url, headers=self.headers, timeout=timeout or self.timeout, **kwargs
        )
        response.raise_for_status()
        return response

    async def _execute(self, method: str, url: str, **kwargs: Any) -> Envelope:
        return await self.executor.execute(lambda: self._send(method, url, **kwargs), url=url)

    async def _delete_many(self, user_ids: list[int]) -> CleanupReport:
        envelopes = await asyncio.gather(
            *(self._execute("DELETE", f"{USERS_PATH}/{user_id}") for user_id in user_ids)
        )
        return CleanupReport(
            deleted=[uid for uid, env in zip(user_ids, envelopes, strict=True) if env.status == 204],
            failed=[uid for uid, env in zip(user_ids, envelopes, strict=True) if env.status != 204],
        )


@dataclass(frozen=True, slots=True)
class DatabaseState:
    user_count: int
    users: list[UserResponse] = field(default_factory=list)
    last_user_id: int | None = None


class TestHelpers(RequestBuilder):
    """Waiting, seeding and cleanup helpers for scenario setup and teardown."""

    # not a test class, despite the name
    __test__ = False

    async def wait_for_condition(
        self,
        condition: Callable[[], Awaitable[T]],
        timeout: float = 30.0,
        interval: float = 1.0,
        description: str = "condition",
    ) -> T:
        return await wait_for_condition(condition, timeout, interval, description, sleep=self._sleep)

    async def wait_for_user_exists(self, user_id: int, timeout: float = 30.0) -> UserResponse:
        async def user_visible() -> UserResponse | None:
            envelope = await self._execute("GET", f"{USERS_PATH}/{user_id}")
            return envelope.user() if envelope.status == 200 else None

        return await self.wait_for_condition(user_visible, timeout, 1.0, f"user {user_id} to exist")

    async def wait_for_user_deleted(self, user_id: int, timeout: float = 30.0) -> bool:
        async def user_gone() -> bool:
            envelope = await self._execute("GET", f"{USERS_PATH}/{user_id}")
            return envelope.status == 404

        return await self.wait_for_condition(user_gone, timeout, 1.0, f"user {user_id} to be deleted")

    async def wait_for_user_count(self, expected_count: int, timeout: float = 30.0) -> bool:
        async def count_matches() -> bool:
            envelope = await self._execute("GET", USERS_PATH)
            return envelope.status == 200 and len(envelope.data) == expected_count

        return await self.wait_for_condition(count_matches, timeout, 1.0, f"user count to be {expected_count}")

    async def check_healthy(self) -> bool:
        """One health probe with a short timeout. Never raises."""
        envelope = await RequestExecutor().execute(lambda: self._send("GET", HEALTH_PATH, timeout=5.0), HEALTH_PATH)
        if envelope.status != 200 or not isinstance(envelope.data, dict):
            return False
        return envelope.data.get("status") == HealthStatus.UP.value

    async def wait_for_healthy(self, timeout: float = 60.0, interval: float = 2.0) -> bool:
        return await self.wait_for_condition(self.check_healthy, timeout, interval, "application to be healthy")

    async def create_test_users(self, count: int, template: UserCreateRequest | None = None) -> list[UserResponse]:
        """
        Create `count` users concurrently from a template.

        Names get a " 1", " 2", ... suffix and emails a number before the "@",
        so the users don't collide with each other. Users that fail to be
        created are logged and left out of the result.
        """
        template = template or UserCreateRequest(name="Test User", email="test@example.com", bio="Test user bio")
        local, _, domain = template.email.partition("@")
        requests = [
            UserCreateRequest(
                name=f"{template.name} {i}",
                email=f"{local or 'test'}{i}@{domain or 'example.com'}",
                bio=template.bio,
            )
            for i in range(1, count + 1)
        ]
        envelopes = await asyncio.gather(*(self._execute("POST", USERS_PATH, json=r.to_json()) for r in requests))

        users = []
        for index, envelope in enumerate(envelopes, start=1):
            if envelope.status == 201:
                users.append(envelope.user())
            else:
                logger.warning("failed to create test user", index=index, status=envelope.status, data=envelope.data)
        return users

    async def cleanup_test_users(self, user_ids: list[int]) -> CleanupReport:
        return await self._delete_many(user_ids)

    async def cleanup_all_test_users(self, pattern: str = "Test User") -> CleanupReport:
        """Delete every user whose name contains `pattern` or whose email contains "test"."""
        envelope = await self._execute("GET", USERS_PATH)
        if envelope.status != 200:
            return CleanupReport()
        doomed = [user.id for user in envelope.users() if pattern in user.name or "test" in user.email]
        if not doomed:
            return CleanupReport()
        return await self._delete_many(doomed)

    async def verify_database_empty(self) -> bool:
        envelope = await self._execute("GET", USERS_PATH)
        return envelope.status == 200 and len(envelope.data) == 0

    async def get_database_state(self) -> DatabaseState:
        envelope = await self._execute("GET", USERS_PATH)
        if envelope.status != 200:
            raise HarnessError(f"Failed to get database state: {envelope.status}")
        users = envelope.users()
        return DatabaseState(
            user_count=len(users),
            users=users,
            last_user_id=max((user.id for user in users), default=None),
        )


class UserQuery(RequestBuilder):
    """Builds GET /api/users queries: search, sort, limit and offset."""

    def __init__(self, config: HarnessConfig, http: httpx.AsyncClient, sleep: SleepFn = asyncio.sleep) -> None:
        super().__init__(config, http, sleep)
        self._params: dict[str, str] = {}

    @property
    def params(self) -> dict[str, str]:
        return dict(self._params)

    def search(self, term: str) -> Self:
        self._params["search"] = term
        return self

    def sort_by(self, sort_field: str, order: str = "asc") -> Self:
        self._params["sortBy"] = sort_field
        self._params["sortOrder"] = order
        return self

    def limit(self, count: int) -> Self:
        self._params["limit"] = str(count)
        return self

    def offset(self, start: int) -> Self:
        self._params["offset"] = str(start)
        return self

    def paginate(self, page: int, page_size: int) -> Self:
        """Pages are numbered from 1."""
        if page < 1:
            raise ValueError("page numbers start at 1")
        return self.limit(page_size).offset((page - 1) * page_size)

    def reset(self) -> Self:
        self._params = {}
        return self

    async def execute(self) -> Envelope:
        return await self._execute("GET", USERS_PATH, params=self.params)

    async def find_by_email(self, email: str) -> Envelope:
        """The user with exactly this email as `data`, or None when there isn't one."""
        envelope = await self._execute("GET", USERS_PATH, params={"search": email})
        if envelope.status != 200 or not isinstance(envelope.data, list):
            return envelope
        match = next((user for user in envelope.data if user.get("email") == email), None)
        return Envelope(status=envelope.status, data=match, headers=envelope.headers)

    async def find_by_ids(self, ids: list[int]) -> Envelope:
        """Fetch users concurrently; ids that don't come back 200 are left out."""
        envelopes = await asyncio.gather(*(self._execute("GET", f"{USERS_PATH}/{user_id}") for user_id in ids))
        return Envelope(status=200, data=[envelope.data for envelope in envelopes if envelope.status == 200])

    async def bulk_delete(self, user_ids: list[int]) -> Envelope:
        report = await self._delete_many(user_ids)
        return Envelope(status=200, data={"deleted": report.deleted, "failed": report.failed})
