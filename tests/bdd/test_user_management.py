from pytest_bdd import given, parsers, scenarios, then, when

from userapi_harness import ScenarioContext
from userapi_harness.models import UserCreateRequest

from .config import EVENTUAL_TIMEOUT
from .helpers import user_request_from_table

scenarios("../../features/user-management.feature")

# shared steps are in shared/api_shared.py
# included from conftest via `pytest_plugins`


@given("I have invalid user data:")
def _(ctx: ScenarioContext, datatable):
    """I have invalid user data."""
    ctx.user_data = user_request_from_table(datatable)


@when("I request all users")
def _(ctx: ScenarioContext, run):
    """I request all users."""
    ctx.remember(run(ctx.gateway.get_all_users_compat()))


@when("I request the created user")
def _(ctx: ScenarioContext, run):
    """I request the created user."""
    created = ctx.last_created_user()
    assert created is not None, "no user was created"
    ctx.remember(run(ctx.gateway.get_user_by_id_compat(created.id)))


@when(parsers.parse("I request a user with ID {user_id:d}"))
def _(ctx: ScenarioContext, run, user_id: int):
    """I request a user with the given ID."""
    ctx.remember(run(ctx.gateway.get_user_by_id_compat(user_id)))


@when("I update the user with:")
def _(ctx: ScenarioContext, run, datatable):
    """I update the user with."""
    ctx.user_data = user_request_from_table(datatable)
    user = ctx.require_current_user()
    ctx.remember(run(ctx.gateway.update_user_compat(user.id, ctx.user_data)))


@when(parsers.parse("I try to update a user with ID {user_id:d}"))
def _(ctx: ScenarioContext, run, user_id: int):
    """I try to update a user with the given ID."""
    request = UserCreateRequest(name="Nobody Here", email="nobody@example.com")
    ctx.remember(run(ctx.gateway.update_user_compat(user_id, request)))


@when("I delete the user")
def _(ctx: ScenarioContext, run):
    """I delete the user."""
    user = ctx.require_current_user()
    response = ctx.remember(run(ctx.gateway.delete_user_compat(user.id)))
    if response.status == 204:
        ctx.tracker.release(user.id)


@when(parsers.parse("I try to delete a user with ID {user_id:d}"))
def _(ctx: ScenarioContext, run, user_id: int):
    """I try to delete a user with the given ID."""
    ctx.remember(run(ctx.gateway.delete_user_compat(user_id)))


@when(parsers.parse('I try to create another user with email "{email}"'))
def _(ctx: ScenarioContext, run, email: str):
    """I try to create another user with the given email."""
    response = ctx.remember(run(ctx.gateway.create_user_compat(UserCreateRequest(name="Another User", email=email))))
    if response.status == 201:
        ctx.add_created_user(response.user())


@when(parsers.parse('I search for users matching "{term}" sorted by name descending'))
def _(ctx: ScenarioContext, run, term: str):
    """I search for users sorted by name descending."""
    query = ctx.gateway.queries.reset().search(term).sort_by("name", "desc")
    ctx.remember(run(query.execute()))


@when(parsers.parse("I request page {page:d} of users with {page_size:d} per page"))
def _(ctx: ScenarioContext, run, page: int, page_size: int):
    """I request a page of users."""
    ctx.remember(run(ctx.gateway.queries.reset().paginate(page, page_size).execute()))


@then("the response should contain an empty list")
def _(ctx: ScenarioContext):
    """the response should contain an empty list."""
    assert ctx.require_response().data == []


@then(parsers.parse('the response should contain the user "{name}"'))
def _(ctx: ScenarioContext, name: str):
    """the response should contain the named user."""
    user = ctx.require_response().user()
    assert user.name == name
    assert user.id == ctx.require_current_user().id


@then("the response should contain the updated user data")
def _(ctx: ScenarioContext):
    """the response should contain the updated user data."""
    expected = ctx.require_user_data()
    user = ctx.require_response().user()
    assert user.id == ctx.require_current_user().id
    assert (user.name, user.email, user.bio) == (expected.name, expected.email, expected.bio)


@then("the user should eventually be gone")
def _(ctx: ScenarioContext, run):
    """the user should eventually be gone."""
    user = ctx.require_current_user()
    assert run(ctx.gateway.test_helpers.wait_for_user_deleted(user.id, timeout=EVENTUAL_TIMEOUT))


@then("the response should contain validation errors")
def _(ctx: ScenarioContext):
    """the response should contain validation errors."""
    error = ctx.require_response().error
    assert error is not None
    assert error.error == "Validation Failed"
    assert error.validation_errors


@then("the response should contain a conflict error message")
def _(ctx: ScenarioContext):
    """the response should contain a conflict error message."""
    error = ctx.require_response().error
    assert error is not None
    assert error.error == "Conflict"
    assert "already exists" in error.message


@then(parsers.parse('the first user in the response should be "{name}"'))
def _(ctx: ScenarioContext, name: str):
    """the first user in the response should be the named user."""
    users = ctx.require_response().users()
    assert users, "the response has no users"
    assert users[0].name == name
