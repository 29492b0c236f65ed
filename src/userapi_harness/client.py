"""ABOUTME: Typed async client for the user API and its actuator endpoints
ABOUTME: Methods return TypedResponse on 2xx and raise httpx errors otherwise"""

from collections.abc import Callable
from typing import Any

import httpx

from .envelope import flatten_headers
from .exceptions import UnexpectedResponseBody
from .models import HealthResponse, ProfileValidationResponse, TypedResponse, UserCreateRequest, UserResponse

USERS_PATH = "/api/users"


def _as_json(data: Any) -> Any:
    return data


def _user_list(data: Any) -> list[UserResponse]:
    if not isinstance(data, list):
        raise TypeError("not a list")
    return [UserResponse.from_json(item) for item in data]


def _wrap(response: httpx.Response, data: Any) -> TypedResponse[Any]:
    headers = flatten_headers(response.headers)
    return TypedResponse(status=response.status_code, data=data, headers=headers, raw=response)


def _typed(response: httpx.Response, parse: Callable[[Any], Any], what: str) -> TypedResponse[Any]:
    """
    Parse a 2xx body with `parse`.

    Raises:
        UnexpectedResponseBody: the body is not JSON or does not fit the model
    """
    try:
        data = parse(response.json())
    except (ValueError, KeyError, TypeError, AttributeError) as error:
        raise UnexpectedResponseBody(response, what) from error
    return _wrap(response, data)


class UsersApi:
    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = await self._http.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    async def get_all_users(self, **query: Any) -> TypedResponse[list[UserResponse]]:
        """List users; `query` becomes the query string (search, sortBy, sortOrder, limit, offset)."""
        params = {key: value for key, value in query.items() if value is not None}
        response = await self._send("GET", USERS_PATH, params=params)
        return _typed(response, _user_list, "a list of users")

    async def get_user_by_id(self, user_id: int) -> TypedResponse[UserResponse]:
        response = await self._send("GET", f"{USERS_PATH}/{user_id}")
        return _typed(response, UserResponse.from_json, "a user")

    async def create_user(self, request: UserCreateRequest) -> TypedResponse[UserResponse]:
        response = await self._send("POST", USERS_PATH, json=request.to_json())
        return _typed(response, UserResponse.from_json, "a user")

    async def update_user(self, user_id: int, request: UserCreateRequest) -> TypedResponse[UserResponse]:
        response = await self._send("PUT", f"{USERS_PATH}/{user_id}", json=request.to_json())
        return _typed(response, UserResponse.from_json, "a user")

    async def delete_user(self, user_id: int) -> TypedResponse[None]:
        response = await self._send("DELETE", f"{USERS_PATH}/{user_id}")
        return _wrap(response, None)

    async def validate_profile(self, request: UserCreateRequest) -> TypedResponse[ProfileValidationResponse]:
        response = await self._send("POST", f"{USERS_PATH}/validate-profile", json=request.to_json())
        return _typed(response, ProfileValidationResponse.from_json, "a profile validation result")


class ActuatorApi:
    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def _get(self, path: str) -> httpx.Response:
        response = await self._http.get(f"/actuator{path}")
        response.raise_for_status()
        return response

    async def health(self) -> TypedResponse[HealthResponse]:
        response = await self._get("/health")
        return _typed(response, HealthResponse.from_json, "a health report")

    async def info(self) -> TypedResponse[dict[str, Any]]:
        return _typed(await self._get("/info"), _as_json, "JSON")

    async def metrics(self) -> TypedResponse[dict[str, Any]]:
        return _typed(await self._get("/metrics"), _as_json, "JSON")

    async def endpoint(self, name: str) -> TypedResponse[Any]:
        return _typed(await self._get(f"/{name}"), _as_json, "JSON")
