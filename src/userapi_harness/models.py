"""ABOUTME: Typed request and response models for the user API
ABOUTME: What the typed client sends and returns, mirroring the service's JSON contract"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

import httpx

T = TypeVar("T")


class HealthStatus(Enum):
    UP = "UP"
    DOWN = "DOWN"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"
    UNKNOWN = "UNKNOWN"


class RiskScore(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True, slots=True)
class UserCreateRequest:
    name: str
    email: str
    bio: str | None = None

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {"name": self.name, "email": self.email}
        if self.bio is not None:
            body["bio"] = self.bio
        return body

    @classmethod
    def from_row(cls, row: dict[str, str]) -> "UserCreateRequest":
        """Build from a Gherkin data table row, where a blank bio means no bio."""
        return cls(name=row.get("name", ""), email=row.get("email", ""), bio=row.get("bio") or None)


@dataclass(frozen=True, slots=True)
class UserResponse:
    id: int
    name: str
    email: str
    bio: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "UserResponse":
        return cls(id=int(data["id"]), name=data["name"], email=data["email"], bio=data.get("bio"))

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email, "bio": self.bio}


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """The service's error body, also synthesized client-side for transport failures."""

    timestamp: str
    status: int
    error: str
    message: str
    path: str
    validation_errors: list[str] | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ErrorPayload":
        return cls(
            timestamp=str(data["timestamp"]),
            status=int(data["status"]),
            error=str(data["error"]),
            message=str(data.get("message", "")),
            path=str(data.get("path", "")),
            validation_errors=data.get("validationErrors"),
        )

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "timestamp": self.timestamp,
            "status": self.status,
            "error": self.error,
            "message": self.message,
            "path": self.path,
        }
        if self.validation_errors is not None:
            body["validationErrors"] = list(self.validation_errors)
        return body


@dataclass(frozen=True, slots=True)
class HealthResponse:
    status: HealthStatus
    components: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "HealthResponse":
        return cls(status=HealthStatus(data["status"]), components=dict(data.get("components") or {}))

    def to_json(self) -> dict[str, Any]:
        return {"status": self.status.value, "components": self.components}

    def component_status(self, name: str) -> HealthStatus | None:
        component = self.components.get(name)
        return HealthStatus(component["status"]) if component else None


@dataclass(frozen=True, slots=True)
class ProfileValidationResponse:
    valid: bool
    message: str
    risk_score: RiskScore

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ProfileValidationResponse":
        return cls(valid=bool(data["valid"]), message=str(data["message"]), risk_score=RiskScore(data["riskScore"]))

    def to_json(self) -> dict[str, Any]:
        return {"valid": self.valid, "message": self.message, "riskScore": self.risk_score.value}


@dataclass(frozen=True, slots=True)
class TypedResponse(Generic[T]):
    """
    What the typed client returns on success. `raw` is the response `data` was
    parsed from, when there was one.
    """

    status: int
    data: T
    headers: dict[str, str]
    raw: httpx.Response | None = None
