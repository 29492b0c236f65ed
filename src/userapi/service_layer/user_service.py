"""ABOUTME: User management service layer with business logic for user operations
ABOUTME: Handles listing, creation, update and deletion of users, gated by profile validation"""

import structlog

from userapi.adapters.profile_validation import AbstractProfileValidator
from userapi.domain.profile import ProfileValidationRequest, ProfileValidationResult
from userapi.domain.users import User
from userapi.domain.validators import validate_user_fields

from .exceptions import (
    EmailAlreadyExists,
    ProfileValidationRejected,
    UserNotFoundError,
    UserValidationError,
)
from .repositories import SORTABLE_FIELDS
from .unit_of_work import AbstractUnitOfWork

logger = structlog.get_logger(__name__)


def list_users(
    uow: AbstractUnitOfWork,
    search: str | None = None,
    sort_by: str = "id",
    sort_order: str = "asc",
    limit: int | None = None,
    offset: int = 0,
) -> list[User]:
    """
    List users, optionally filtered by a search term and paginated.

    Raises:
        UserValidationError: if the sort or pagination options are invalid
    """
    errors = []
    if sort_by not in SORTABLE_FIELDS:
        errors.append(f"sortBy: must be one of {', '.join(SORTABLE_FIELDS)}")
    if sort_order not in ("asc", "desc"):
        errors.append("sortOrder: must be asc or desc")
    if limit is not None and limit < 0:
        errors.append("limit: must not be negative")
    if offset < 0:
        errors.append("offset: must not be negative")
    if errors:
        raise UserValidationError(errors)

    with uow:
        users = uow.users.filter_paginated(
            search=search, sort_by=sort_by, sort_order=sort_order, limit=limit, offset=offset
        )
        return [user.create_detached_copy() for user in users]


def count_users(uow: AbstractUnitOfWork) -> int:
    with uow:
        return uow.users.count()


def get_user(uow: AbstractUnitOfWork, user_id: int) -> User:
    with uow:
        user = uow.users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user.create_detached_copy()


def validate_profile(
    validator: AbstractProfileValidator, name: str, email: str, bio: str | None = None
) -> ProfileValidationResult:
    """Pass a profile straight through to the external validation service."""
    return validator.validate(ProfileValidationRequest(name=name, email=email, bio=bio))


def _require_valid_profile(validator: AbstractProfileValidator, name: str, email: str, bio: str | None) -> None:
    result = validate_profile(validator, name, email, bio)
    if not result.valid:
        logger.info("profile rejected", email=email, risk_score=result.risk_score.value, message=result.message)
        raise ProfileValidationRejected(result.message)


def create_user(
    uow: AbstractUnitOfWork,
    validator: AbstractProfileValidator,
    name: str,
    email: str,
    bio: str | None = None,
) -> User:
    """
    Create a new user.

    Checks run in this order, all before anything is written: field validation,
    duplicate email, external profile validation.

    Raises:
        UserValidationError: If the fields are invalid
        EmailAlreadyExists: If another user has this email
        ProfileValidationRejected: If the profile validation service rejects the profile
        ProfileServiceUnavailable: If the profile validation service cannot be reached
    """
    errors = validate_user_fields(name, email, bio)
    if errors:
        raise UserValidationError(errors)

    with uow:
        if uow.users.get_by_email(email) is not None:
            raise EmailAlreadyExists(email)

        _require_valid_profile(validator, name, email, bio)

        user = User(name=name, email=email, bio=bio)
        uow.users.add(user)
        uow.commit()
        logger.info("user created", user_id=user.id, email=email)
        return user.create_detached_copy()


def update_user(
    uow: AbstractUnitOfWork,
    validator: AbstractProfileValidator,
    user_id: int,
    name: str,
    email: str,
    bio: str | None = None,
) -> User:
    """
    Replace a user's name, email and bio.

    Raises:
        UserValidationError: If the fields are invalid
        UserNotFoundError: If there is no user with this id
        EmailAlreadyExists: If the new email belongs to another user
        ProfileValidationRejected: If the profile validation service rejects the profile
        ProfileServiceUnavailable: If the profile validation service cannot be reached
    """
    errors = validate_user_fields(name, email, bio)
    if errors:
        raise UserValidationError(errors)

    with uow:
        user = uow.users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        if user.email != email and uow.users.get_by_email(email) is not None:
            raise EmailAlreadyExists(email)

        _require_valid_profile(validator, name, email, bio)

        user.update_profile(name=name, email=email, bio=bio)
        uow.commit()
        logger.info("user updated", user_id=user_id)
        return user.create_detached_copy()


def delete_user(uow: AbstractUnitOfWork, user_id: int) -> None:
    with uow:
        user = uow.users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        uow.users.delete(user)
        uow.commit()
        logger.info("user deleted", user_id=user_id)
