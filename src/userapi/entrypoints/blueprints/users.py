"""ABOUTME: JSON REST endpoints for user management
ABOUTME: CRUD on /api/users plus a pass-through to the profile validation service"""

from typing import Any

from flask import Blueprint, jsonify, request
from flask.typing import ResponseReturnValue

from userapi.domain.validators import validate_user_fields
from userapi.entrypoints.errors import error_response
from userapi.entrypoints.extensions import get_dependencies
from userapi.service_layer import user_service
from userapi.service_layer.exceptions import (
    EmailAlreadyExists,
    ProfileServiceUnavailable,
    ProfileValidationRejected,
    ServiceLayerError,
    UserNotFoundError,
    UserValidationError,
)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


class PayloadError(Exception):
    def __init__(self, errors: list[str]) -> None:
        super().__init__("invalid payload")
        self.errors = errors


def _user_payload() -> tuple[str, str, str | None]:
    """Pull name, email and bio out of the JSON body."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise PayloadError(["body: Request body must be a JSON object"])

    errors = []
    values: dict[str, Any] = {}
    for field in ("name", "email", "bio"):
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            errors.append(f"{field}: must be a string")
        values[field] = value
    if errors:
        raise PayloadError(errors)
    return values["name"] or "", values["email"] or "", values["bio"]


def _int_arg(name: str, errors: list[str]) -> int | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        errors.append(f"{name}: must be an integer")
        return None


@users_bp.errorhandler(PayloadError)
def _payload_error(error: PayloadError) -> ResponseReturnValue:
    return error_response(400, "Validation Failed", "Validation failed for one or more fields", error.errors)


@users_bp.errorhandler(ServiceLayerError)
def _service_layer_error(error: ServiceLayerError) -> ResponseReturnValue:
    """Map a service layer exception to its HTTP status and error label."""
    if isinstance(error, UserValidationError):
        return error_response(400, "Validation Failed", str(error), validation_errors=error.errors)
    if isinstance(error, UserNotFoundError):
        return error_response(404, "Not Found", str(error))
    if isinstance(error, EmailAlreadyExists):
        return error_response(409, "Conflict", str(error))
    if isinstance(error, ProfileValidationRejected | ProfileServiceUnavailable):
        return error_response(400, "Bad Request", str(error))
    raise error


@users_bp.route("", methods=["GET"])
def list_users() -> ResponseReturnValue:
    """List users. Supports search, sortBy, sortOrder, limit and offset query parameters."""
    errors: list[str] = []
    limit = _int_arg("limit", errors)
    offset = _int_arg("offset", errors)
    if errors:
        raise PayloadError(errors)

    users = user_service.list_users(
        get_dependencies().uow(),
        search=request.args.get("search") or None,
        sort_by=request.args.get("sortBy", "id"),
        sort_order=request.args.get("sortOrder", "asc").lower(),
        limit=limit,
        offset=offset or 0,
    )
    return jsonify([user.to_dict() for user in users])


@users_bp.route("/<int:user_id>", methods=["GET"])
def get_user(user_id: int) -> ResponseReturnValue:
    user = user_service.get_user(get_dependencies().uow(), user_id)
    return jsonify(user.to_dict())


@users_bp.route("", methods=["POST"])
def create_user() -> ResponseReturnValue:
    name, email, bio = _user_payload()
    deps = get_dependencies()
    user = user_service.create_user(deps.uow(), deps.profile_validator, name=name, email=email, bio=bio)
    return jsonify(user.to_dict()), 201


@users_bp.route("/<int:user_id>", methods=["PUT"])
def update_user(user_id: int) -> ResponseReturnValue:
    name, email, bio = _user_payload()
    deps = get_dependencies()
    user = user_service.update_user(deps.uow(), deps.profile_validator, user_id, name=name, email=email, bio=bio)
    return jsonify(user.to_dict())


@users_bp.route("/<int:user_id>", methods=["DELETE"])
def delete_user(user_id: int) -> ResponseReturnValue:
    user_service.delete_user(get_dependencies().uow(), user_id)
    return "", 204


@users_bp.route("/validate-profile", methods=["POST"])
def validate_profile() -> ResponseReturnValue:
    """Ask the profile validation service about a profile without creating a user."""
    name, email, bio = _user_payload()
    errors = validate_user_fields(name, email, bio)
    if errors:
        raise UserValidationError(errors)
    result = user_service.validate_profile(get_dependencies().profile_validator, name=name, email=email, bio=bio)
    return jsonify(result.to_json())
