"""ABOUTME: Unit tests for user service layer operations
ABOUTME: Tests listing, creation, update and deletion of users with fake repositories"""

import pytest

from userapi.domain.users import User
from userapi.service_layer import user_service
from userapi.service_layer.exceptions import (
    EmailAlreadyExists,
    ProfileServiceUnavailable,
    ProfileValidationRejected,
    UserNotFoundError,
    UserValidationError,
)
from tests.fakes import FakeProfileValidator, FakeUnitOfWork, rejecting_validator


def _uow_with(*users: User) -> FakeUnitOfWork:
    uow = FakeUnitOfWork()
    for user in users:
        uow.users.add(user)
    return uow


class TestCreateUser:
    """Test user creation functionality."""

    def test_create_user_success(self):
        uow = FakeUnitOfWork()
        validator = FakeProfileValidator()

        user = user_service.create_user(uow, validator, name="John Doe", email="john@example.com", bio="dev")

        assert user.id == 1
        assert user.name == "John Doe"
        assert user.email == "john@example.com"
        assert user.bio == "dev"
        assert uow.users.count() == 1
        assert uow.committed
        assert [r.email for r in validator.requests] == ["john@example.com"]

    def test_create_user_without_bio(self):
        uow = FakeUnitOfWork()

        user = user_service.create_user(uow, FakeProfileValidator(), name="No Bio", email="nobio@example.com")

        assert user.bio is None

    def test_invalid_fields_are_reported_before_anything_else(self):
        uow = _uow_with(User(name="Taken", email="taken@example.com"))
        validator = FakeProfileValidator()

        with pytest.raises(UserValidationError) as exc_info:
            user_service.create_user(uow, validator, name="", email="taken@example.com")

        assert exc_info.value.errors == ["name: Name is required"]
        assert validator.requests == []

    def test_duplicate_email_is_a_conflict_and_skips_profile_validation(self):
        uow = _uow_with(User(name="First User", email="dup@example.com"))
        validator = FakeProfileValidator()

        with pytest.raises(EmailAlreadyExists) as exc_info:
            user_service.create_user(uow, validator, name="Second User", email="dup@example.com")

        assert "already exists" in str(exc_info.value)
        assert validator.requests == []
        assert uow.users.count() == 1

    def test_rejected_profile_is_not_persisted(self):
        uow = FakeUnitOfWork()

        with pytest.raises(ProfileValidationRejected) as exc_info:
            user_service.create_user(uow, rejecting_validator("Bad bio"), name="Bad Person", email="bad@example.com")

        assert str(exc_info.value) == "Profile validation failed: Bad bio"
        assert uow.users.count() == 0
        assert not uow.committed
        assert uow.rolled_back

    def test_unavailable_validation_service_is_not_persisted(self):
        uow = FakeUnitOfWork()

        with pytest.raises(ProfileServiceUnavailable) as exc_info:
            user_service.create_user(
                uow, FakeProfileValidator(unavailable=True), name="Some One", email="someone@example.com"
            )

        assert "temporarily unavailable" in str(exc_info.value)
        assert uow.users.count() == 0


class TestUpdateUser:
    """Test user update functionality."""

    def test_update_user_success(self):
        uow = _uow_with(User(name="Original Name", email="original@example.com"))

        user = user_service.update_user(
            uow, FakeProfileValidator(), 1, name="Updated Name", email="updated@example.com", bio="Updated bio"
        )

        assert user.id == 1
        assert user.name == "Updated Name"
        assert user.email == "updated@example.com"
        assert user.bio == "Updated bio"
        assert uow.committed

    def test_keeping_the_same_email_is_not_a_conflict(self):
        uow = _uow_with(User(name="Same Email", email="same@example.com"))

        user = user_service.update_user(uow, FakeProfileValidator(), 1, name="New Name", email="same@example.com")

        assert user.name == "New Name"

    def test_update_missing_user(self):
        with pytest.raises(UserNotFoundError) as exc_info:
            user_service.update_user(FakeUnitOfWork(), FakeProfileValidator(), 99999, name="Ghost", email="g@example.com")

        assert str(exc_info.value) == "User with id 99999 not found"

    def test_validation_comes_before_not_found(self):
        with pytest.raises(UserValidationError):
            user_service.update_user(FakeUnitOfWork(), FakeProfileValidator(), 99999, name="G", email="bad")

    def test_update_to_another_users_email(self):
        uow = _uow_with(User(name="Alice", email="alice@example.com"), User(name="Bob", email="bob@example.com"))

        with pytest.raises(EmailAlreadyExists):
            user_service.update_user(uow, FakeProfileValidator(), 2, name="Bob", email="alice@example.com")

    def test_rejected_profile_leaves_user_unchanged(self):
        uow = _uow_with(User(name="Fine Fred", email="fred@example.com"))

        with pytest.raises(ProfileValidationRejected):
            user_service.update_user(uow, rejecting_validator(), 1, name="Fine Fred", email="rejected@example.com")

        assert uow.users.get(1).email == "fred@example.com"


class TestReadAndDelete:
    def test_get_user(self):
        uow = _uow_with(User(name="Jane Smith", email="jane@example.com"))

        user = user_service.get_user(uow, 1)

        assert user.name == "Jane Smith"

    def test_get_missing_user(self):
        with pytest.raises(UserNotFoundError):
            user_service.get_user(FakeUnitOfWork(), 42)

    def test_delete_user(self):
        uow = _uow_with(User(name="Doomed", email="doomed@example.com"))

        user_service.delete_user(uow, 1)

        assert uow.users.count() == 0
        assert uow.committed

    def test_delete_missing_user(self):
        with pytest.raises(UserNotFoundError):
            user_service.delete_user(FakeUnitOfWork(), 99999)

    def test_count_users(self):
        uow = _uow_with(User(name="One", email="one@example.com"), User(name="Two", email="two@example.com"))

        assert user_service.count_users(uow) == 2


class TestListUsers:
    @pytest.fixture
    def uow(self):
        return _uow_with(
            User(name="Search Alpha", email="alpha@example.com"),
            User(name="Search Beta", email="beta@example.com"),
            User(name="Other Gamma", email="gamma@example.com"),
        )

    def test_list_all_in_id_order(self, uow):
        users = user_service.list_users(uow)

        assert [u.id for u in users] == [1, 2, 3]

    def test_search_sort_and_page(self, uow):
        users = user_service.list_users(uow, search="search", sort_by="name", sort_order="desc")
        assert [u.name for u in users] == ["Search Beta", "Search Alpha"]

        page = user_service.list_users(uow, limit=2, offset=2)
        assert [u.name for u in page] == ["Other Gamma"]

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"sort_by": "bio"}, "sortBy: must be one of id, name, email"),
            ({"sort_order": "sideways"}, "sortOrder: must be asc or desc"),
            ({"limit": -1}, "limit: must not be negative"),
            ({"offset": -5}, "offset: must not be negative"),
        ],
    )
    def test_invalid_query_options(self, uow, kwargs, message):
        with pytest.raises(UserValidationError) as exc_info:
            user_service.list_users(uow, **kwargs)

        assert exc_info.value.errors == [message]


def test_validate_profile_passes_the_result_through():
    validator = rejecting_validator("nope")

    result = user_service.validate_profile(validator, name="Rita", email="rejected@example.com", bio=None)

    assert result.valid is False
    assert result.message == "nope"
    assert validator.requests[0].name == "Rita"
