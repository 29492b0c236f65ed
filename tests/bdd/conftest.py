import asyncio
import threading
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

import pytest
from flask import Flask
from werkzeug.serving import make_server

from tests.conftest import wait_for_webapp_to_come_up
from userapi.adapters.profile_validation import HttpProfileValidator
from userapi.config import ProfileValidationCfg
from userapi.entrypoints.flask_app import create_app
from userapi_harness import ApiGateway, HarnessConfig, ScenarioContext

from .config import EXTERNAL_API_URL, EXTERNAL_PROFILE_SERVICE_URL, HOST, SCENARIO_TIMEOUT, Urls
from .profile_stub import create_profile_stub_app

T = TypeVar("T")


class ServerThread(threading.Thread):
    """Serve a WSGI app on a free port in a background thread."""

    def __init__(self, app: Flask) -> None:
        super().__init__(daemon=True)
        # single threaded, so the in-memory database is only used from one thread
        self.server = make_server(HOST, 0, app, threaded=False)

    @property
    def url(self) -> str:
        return f"http://{HOST}:{self.server.server_port}"

    def run(self) -> None:
        self.server.serve_forever()

    def stop(self) -> None:
        self.server.shutdown()
        self.join(timeout=5)


@pytest.fixture(scope="session")
def profile_service_url():
    """The profile validation service: an external one if configured, otherwise a local stub."""
    if EXTERNAL_PROFILE_SERVICE_URL:
        yield EXTERNAL_PROFILE_SERVICE_URL
        return

    server = ServerThread(create_profile_stub_app())
    server.start()
    wait_for_webapp_to_come_up(f"{server.url}{Urls.stub_health}")
    print("Profile validation stub started on", server.url)

    yield server.url

    server.stop()


async def sweep_test_users(base_url: str) -> None:
    async with ApiGateway(HarnessConfig.from_env().replace(base_url=base_url)) as gateway:
        await gateway.teardown_test("feature suite")


@pytest.fixture(scope="session")
def api_base_url(profile_service_url):
    """Start the user API in background, wired to the profile validation service"""
    if EXTERNAL_API_URL:
        wait_for_webapp_to_come_up(f"{EXTERNAL_API_URL}{Urls.health}")
        print("Using existing user API at", EXTERNAL_API_URL)
        yield EXTERNAL_API_URL
        asyncio.run(sweep_test_users(EXTERNAL_API_URL))
        return

    validator = HttpProfileValidator(ProfileValidationCfg(base_url=profile_service_url, timeout=5.0))
    server = ServerThread(create_app("testing", profile_validator=validator))
    server.start()
    wait_for_webapp_to_come_up(f"{server.url}{Urls.health}")
    print("Test server started on", server.url)

    yield server.url

    # Cleanup
    asyncio.run(sweep_test_users(server.url))
    server.stop()
    validator.close()
    print("Test server stopped")


@pytest.fixture
def harness_config(api_base_url) -> HarnessConfig:
    return HarnessConfig.from_env().replace(base_url=api_base_url, timeout=SCENARIO_TIMEOUT)


@pytest.fixture
def run():
    """Run a coroutine on this scenario's event loop. Steps are sync, the harness is async."""
    with asyncio.Runner() as runner:

        def _run(coro: Coroutine[Any, Any, T]) -> T:
            return runner.run(coro)

        yield _run


@pytest.fixture
def gateway(harness_config, run: Callable[[Coroutine[Any, Any, Any]], Any]):
    """A fresh gateway per scenario"""
    gateway = ApiGateway(harness_config)
    yield gateway
    run(gateway.aclose())


@pytest.fixture
def ctx(request, gateway, run):
    """Scenario state; whatever the scenario created is deleted when it ends, pass or fail."""
    context = ScenarioContext(gateway, name=request.node.name)
    yield context
    call_report = getattr(request.node, "rep_call", None)
    run(context.finish(failed=call_report is not None and call_report.failed))


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_runtest_makereport(item, call):
    # keep each phase's report on the item so fixtures can see whether the scenario failed
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)
