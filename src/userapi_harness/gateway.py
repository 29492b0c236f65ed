"""ABOUTME: One entry point to the service under test for a scenario
ABOUTME: Typed clients, envelope-returning compat methods, builders and lifecycle helpers"""

import asyncio
from datetime import UTC, datetime
from typing import Any, Self

import httpx
import structlog

from .builders import TestHelpers, UserQuery
from .client import ActuatorApi, UsersApi
from .compat import compat
from .config import HarnessConfig
from .exceptions import HarnessError
from .executor import SleepFn
from .lifecycle import CleanupReport
from .models import TypedResponse, UserCreateRequest

logger = structlog.get_logger(__name__)


class ApiGateway:
    """
    Owns one `httpx.AsyncClient` and everything built on it.

    Gateways are plain values: build one per scenario (or per suite) and pass
    it to whatever needs it. The `with_*` methods return a new gateway with
    its own client, which the caller must close too. Use it as an async
    context manager, or call `aclose()`.

    The `*_compat` methods never raise for HTTP or transport failures; they
    return an `Envelope` whatever happened.
    """

    def __init__(
        self,
        config: HarnessConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.config = config
        self._transport = transport
        self._sleep = sleep
        self.http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            headers=config.headers,
            transport=transport,
        )
        self.users = UsersApi(self.http)
        self.actuator = ActuatorApi(self.http)
        self.test_helpers = TestHelpers(config, self.http, sleep)
        self.queries = UserQuery(config, self.http, sleep)
        if config.enable_logging:
            logger.info("api gateway initialised", base_url=config.base_url, retries=config.retries)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @compat
    async def get_all_users_compat(self, **query: Any) -> TypedResponse[Any]:
        return await self.users.get_all_users(**query)

    @compat
    async def get_user_by_id_compat(self, user_id: int) -> TypedResponse[Any]:
        return await self.users.get_user_by_id(user_id)

    @compat
    async def create_user_compat(self, request: UserCreateRequest) -> TypedResponse[Any]:
        return await self.users.create_user(request)

    @compat
    async def update_user_compat(self, user_id: int, request: UserCreateRequest) -> TypedResponse[Any]:
        return await self.users.update_user(user_id, request)

    @compat
    async def delete_user_compat(self, user_id: int) -> TypedResponse[Any]:
        return await self.users.delete_user(user_id)

    @compat
    async def validate_profile_compat(self, request: UserCreateRequest) -> TypedResponse[Any]:
        return await self.users.validate_profile(request)

    @compat
    async def get_health_compat(self) -> TypedResponse[Any]:
        return await self.actuator.health()

    @compat
    async def get_info_compat(self) -> TypedResponse[Any]:
        return await self.actuator.info()

    @compat
    async def get_metrics_compat(self) -> TypedResponse[Any]:
        return await self.actuator.metrics()

    @compat
    async def get_actuator_endpoint_compat(self, name: str) -> TypedResponse[Any]:
        return await self.actuator.endpoint(name)

    async def is_healthy(self) -> bool:
        return await self.test_helpers.check_healthy()

    async def wait_for_healthy(self, timeout: float = 60.0) -> bool:
        return await self.test_helpers.wait_for_healthy(timeout)

    async def setup_test(self, description: str = "") -> None:
        if self.config.enable_logging:
            logger.info("setting up test", description=description or "unknown test")
        await self.wait_for_healthy()
        if self.config.enable_logging:
            logger.info("test setup complete, application is healthy")

    async def teardown_test(self, description: str = "") -> CleanupReport | None:
        """Sweep leftover test users. Failures are logged, not raised."""
        if self.config.enable_logging:
            logger.info("tearing down test", description=description or "unknown test")
        try:
            report = await self.test_helpers.cleanup_all_test_users()
        except HarnessError as error:
            logger.warning("test data cleanup failed", error=str(error))
            return None
        if self.config.enable_logging:
            logger.info("test data cleanup complete", deleted=report.deleted, failed=report.failed)
        return report

    async def diagnose(self) -> dict[str, Any]:
        healthy, state = await asyncio.gather(
            self.is_healthy(), self.test_helpers.get_database_state(), return_exceptions=True
        )
        return {
            "healthy": healthy if isinstance(healthy, bool) else False,
            "userCount": -1 if isinstance(state, BaseException) else state.user_count,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    def _copy(self, **changes: Any) -> "ApiGateway":
        return ApiGateway(self.config.replace(**changes), transport=self._transport, sleep=self._sleep)

    def with_timeout(self, timeout: float) -> "ApiGateway":
        return self._copy(timeout=timeout)

    def with_retry(self, retries: int, retry_delay: float | None = None) -> "ApiGateway":
        return self._copy(retries=retries, retry_delay=self.config.retry_delay if retry_delay is None else retry_delay)

    def with_headers(self, headers: dict[str, str]) -> "ApiGateway":
        return self._copy(headers={**self.config.headers, **headers})

    def with_auth(self, token: str) -> "ApiGateway":
        return self.with_headers({"Authorization": f"Bearer {token}"})

    def with_logging(self, enabled: bool = True) -> "ApiGateway":
        return self._copy(enable_logging=enabled)

    @classmethod
    def for_local(cls, port: int = 8080) -> "ApiGateway":
        return cls(HarnessConfig.for_local(port))

    @classmethod
    def for_testing(cls, base_url: str = "") -> "ApiGateway":
        return cls(HarnessConfig.for_testing(base_url))

    @classmethod
    def for_ci(cls, base_url: str = "") -> "ApiGateway":
        return cls(HarnessConfig.for_ci(base_url))
