"""ABOUTME: HTTP client for the external profile validation service
ABOUTME: Turns the service's replies into ProfileValidationResult or a ProfileServiceUnavailable error"""

import abc

import httpx
import structlog

from userapi.config import ProfileValidationCfg
from userapi.domain.profile import ProfileValidationRequest, ProfileValidationResult, RiskScore
from userapi.service_layer.exceptions import ProfileServiceUnavailable

logger = structlog.get_logger(__name__)


class AbstractProfileValidator(abc.ABC):
    @abc.abstractmethod
    def validate(self, request: ProfileValidationRequest) -> ProfileValidationResult:
        """Ask the validation service whether a profile is acceptable.

        Raises:
            ProfileServiceUnavailable: if no usable answer could be obtained
        """
        raise NotImplementedError


class HttpProfileValidator(AbstractProfileValidator):
    """Calls POST {base_url}/api/profile/validate synchronously."""

    def __init__(self, cfg: ProfileValidationCfg, transport: httpx.BaseTransport | None = None) -> None:
        self.cfg = cfg
        self._client = httpx.Client(base_url=cfg.base_url, timeout=cfg.timeout, transport=transport)
        logger.info("profile validator initialised", base_url=cfg.base_url, timeout=cfg.timeout)

    def close(self) -> None:
        self._client.close()

    def validate(self, request: ProfileValidationRequest) -> ProfileValidationResult:
        logger.debug("validating profile", name=request.name, email=request.email)
        try:
            response = self._client.post("/api/profile/validate", json=request.to_json())
        except httpx.HTTPError as error:
            logger.error("profile validation service unavailable", email=request.email, error=str(error))
            raise ProfileServiceUnavailable() from error

        if response.is_client_error:
            logger.warning("profile validation service rejected request", status=response.status_code, body=response.text)
            return ProfileValidationResult(
                valid=False,
                message=f"Profile validation rejected: {response.text}",
                risk_score=RiskScore.HIGH,
            )
        if not response.is_success:
            logger.warning("profile validation service error", status=response.status_code, body=response.text)
            raise ProfileServiceUnavailable(f"Profile validation service error: {response.status_code}")

        try:
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            result = ProfileValidationResult.from_json(data)
        except ValueError as error:
            # covers a non-JSON body as well as an unknown riskScore
            raise ProfileServiceUnavailable(f"Profile validation service returned an invalid reply: {error}") from error

        logger.debug("profile validation result", email=request.email, valid=result.valid, message=result.message)
        return result
