"""ABOUTME: Field validation for user payloads
ABOUTME: Produces per-field messages in the order the API reports them"""

from django.core.exceptions import ValidationError
from django.core.validators import EmailValidator

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 200


def validate_email(email: str) -> None:
    """Basic email validation."""
    # we use the well-tested and maintained Django EmailValidator
    # Note that passing in the message is important - if we don't do that then
    # the validator will try to use the default message, which will trigger the
    # auto localisation of the string which then blows up.
    validator = EmailValidator(message="Invalid email address")
    try:
        validator(email)
    except ValidationError as error:
        raise ValueError("Invalid email address") from error


def validate_user_fields(name: str | None, email: str | None, bio: str | None) -> list[str]:
    """
    Validate the fields of a create/update payload.

    Returns:
        A list of "field: message" strings, empty when the payload is valid.
    """
    errors: list[str] = []

    if name is None or not name.strip():
        errors.append("name: Name is required")
    elif not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        errors.append(f"name: Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters")

    if email is None or not email.strip():
        errors.append("email: Email is required")
    else:
        try:
            validate_email(email)
        except ValueError:
            errors.append("email: Email should be valid")

    if bio is not None and len(bio) > BIO_MAX_LENGTH:
        errors.append(f"bio: Bio cannot exceed {BIO_MAX_LENGTH} characters")

    return errors
