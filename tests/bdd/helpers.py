from typing import Any

import httpx

from userapi_harness.models import UserCreateRequest

from .config import Urls


def user_request_from_table(datatable: list[list[str]]) -> UserCreateRequest:
    """The first data row of a table whose header row names the fields."""
    header, values = datatable[0], datatable[1]
    return UserCreateRequest.from_row(dict(zip(header, values, strict=True)))


async def profile_validation_calls(http: httpx.AsyncClient, base_url: str) -> list[dict[str, Any]]:
    """Validation requests the profile service has logged, in the WireMock request log shape."""
    response = await http.get(f"{base_url}{Urls.stub_requests}")
    response.raise_for_status()
    return [
        entry["request"]
        for entry in response.json()["requests"]
        if Urls.profile_validate in entry["request"]["url"] and entry["request"]["method"] == "POST"
    ]


async def reset_profile_service_requests(http: httpx.AsyncClient, base_url: str) -> None:
    response = await http.delete(f"{base_url}{Urls.stub_requests}")
    response.raise_for_status()
