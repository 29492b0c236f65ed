"""ABOUTME: Value objects exchanged with the external profile validation service
ABOUTME: Request and result shapes plus the risk score scale"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class RiskScore(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True, slots=True)
class ProfileValidationRequest:
    name: str
    email: str
    bio: str | None = None

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "email": self.email, "bio": self.bio}


@dataclass(frozen=True, slots=True)
class ProfileValidationResult:
    valid: bool
    message: str
    risk_score: RiskScore

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ProfileValidationResult":
        risk = data.get("riskScore") or RiskScore.MEDIUM.value
        return cls(
            valid=bool(data.get("valid", False)),
            message=str(data.get("message", "")),
            risk_score=RiskScore(risk),
        )

    def to_json(self) -> dict[str, Any]:
        return {"valid": self.valid, "message": self.message, "riskScore": self.risk_score.value}
