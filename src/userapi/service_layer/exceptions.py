"""ABOUTME: Custom exceptions for service layer operations
ABOUTME: Defines business logic exceptions with proper error messages"""


class UserApiError(Exception):
    """Base exception for all our custom errors."""


class ServiceLayerError(UserApiError):
    """Base exception for all service layer errors."""


class NotFoundError(ServiceLayerError):
    """General error to indicate something cannot be found in a repository"""


class UserNotFoundError(NotFoundError):
    """A user could not be found in the database"""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User with id {user_id} not found")
        self.user_id = user_id


class EmailAlreadyExists(ServiceLayerError):
    """Raised when a create or update would duplicate another user's email."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email {email} already exists")
        self.email = email


class UserValidationError(ServiceLayerError):
    """Raised when the submitted fields fail validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Validation failed for one or more fields")
        self.errors = errors


class ProfileValidationRejected(ServiceLayerError):
    """The profile validation service said the profile is not acceptable."""

    def __init__(self, reason: str = "") -> None:
        super().__init__(f"Profile validation failed: {reason}" if reason else "Profile validation failed")
        self.reason = reason


class ProfileServiceUnavailable(ServiceLayerError):
    """The profile validation service could not give an answer."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail or "Profile validation service temporarily unavailable"
        super().__init__(f"Profile validation failed: {self.detail}")
