"""ABOUTME: Unit tests for per-scenario context
ABOUTME: Preconditions, response bookkeeping and end-of-scenario cleanup"""

import pytest
import pytest_asyncio

from userapi_harness.envelope import Envelope
from userapi_harness.exceptions import MissingPrecondition
from userapi_harness.gateway import ApiGateway
from userapi_harness.lifecycle import TrackerState
from userapi_harness.models import UserCreateRequest, UserResponse
from userapi_harness.world import ScenarioContext


@pytest_asyncio.fixture
async def ctx(harness_config, fake_api, fake_sleep):
    async with ApiGateway(harness_config, transport=fake_api.transport(), sleep=fake_sleep) as gateway:
        yield ScenarioContext(gateway, name="Create a valid user")


def test_fresh_context_is_empty(ctx):
    assert ctx.response is None
    assert ctx.created_users == []
    assert ctx.last_created_user() is None
    assert ctx.tracker.scenario == "Create a valid user"


@pytest.mark.parametrize(
    "require, message",
    [
        ("require_user_data", "No user data set"),
        ("require_profile_data", "No profile data set"),
        ("require_current_user", "No current user"),
        ("require_response", "No response available"),
    ],
)
def test_missing_preconditions_raise(ctx, require, message):
    with pytest.raises(MissingPrecondition, match=message):
        getattr(ctx, require)()


def test_preconditions_return_what_was_set(ctx):
    ctx.user_data = UserCreateRequest(name="A B", email="a@example.com")

    assert ctx.require_user_data().email == "a@example.com"


def test_remember_tracks_last_error(ctx):
    ctx.remember(Envelope(status=200, data=[]))
    assert ctx.last_error is None

    ctx.remember(Envelope(status=400, data={"error": "Bad Request"}))
    assert ctx.last_error == {"error": "Bad Request"}

    ctx.remember(Envelope(status=502, data="Bad Gateway"))
    assert ctx.last_error == {"body": "Bad Gateway"}
    assert ctx.require_response().status == 502


def test_reset_clears_scenario_data_but_not_created_users(ctx):
    user = UserResponse(id=1, name="A B", email="a@example.com")
    ctx.add_created_user(user)
    ctx.remember(Envelope(status=404, data={}))
    ctx.current_user = user

    ctx.reset()

    assert ctx.response is None
    assert ctx.current_user is None
    assert ctx.last_error is None
    assert ctx.created_users == [user]


def test_add_created_user_tracks_it(ctx):
    user = UserResponse(id=5, name="A B", email="a@example.com")

    ctx.add_created_user(user)

    assert ctx.last_created_user() == user
    assert ctx.tracker.state == TrackerState.ACTIVE
    assert ctx.tracker.tracked[0].payload == user.to_json()


def test_diagnostics(ctx):
    ctx.remember(Envelope(status=409, data={"error": "Conflict"}))

    assert ctx.diagnostics() == {
        "scenario": "Create a valid user",
        "last_response": {"status": 409, "data": {"error": "Conflict"}, "headers": {}},
        "last_error": {"error": "Conflict"},
    }


@pytest.mark.asyncio
async def test_finish_deletes_created_users(ctx, fake_api):
    seeded = fake_api.seed("Test User", "t@example.com")
    ctx.add_created_user(UserResponse.from_json(seeded))

    report = await ctx.finish()

    assert report.deleted == [seeded["id"]]
    assert fake_api.users == {}
    assert ctx.created_users == []


@pytest.mark.asyncio
async def test_finish_cleans_up_after_failure_too(ctx, fake_api):
    seeded = fake_api.seed("Test User", "t@example.com")
    ctx.add_created_user(UserResponse.from_json(seeded))
    ctx.remember(Envelope(status=500, data={"error": "Internal Server Error"}))

    report = await ctx.finish(failed=True)

    assert report.deleted == [seeded["id"]]


@pytest.mark.asyncio
async def test_finish_skips_released_users(ctx, fake_api):
    seeded = fake_api.seed("Test User", "t@example.com")
    ctx.add_created_user(UserResponse.from_json(seeded))
    ctx.tracker.release(seeded["id"])

    report = await ctx.finish()

    assert report.empty
    assert seeded["id"] in fake_api.users
