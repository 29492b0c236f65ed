"""ABOUTME: Configuration for the black-box test harness
ABOUTME: Where the service under test lives and how patiently to talk to it"""

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv

from userapi.config import to_bool

load_dotenv()

DEFAULT_BASE_URL = "http://localhost:8080"


@dataclass(slots=True, kw_only=True, frozen=True)
class HarnessConfig:
    base_url: str = DEFAULT_BASE_URL
    # seconds
    timeout: float = 10.0
    retries: int = 0
    retry_delay: float = 1.0
    headers: dict[str, str] = field(default_factory=dict)
    enable_logging: bool = False
    profile_validation_url: str = "http://localhost:8081"

    def replace(self, **changes: Any) -> "HarnessConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_env(cls) -> "HarnessConfig":
        return HarnessConfig(
            base_url=os.environ.get("API_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.environ.get("API_TIMEOUT", "10")),
            retries=int(os.environ.get("API_RETRIES", "0")),
            retry_delay=float(os.environ.get("API_RETRY_DELAY", "1")),
            enable_logging=to_bool(os.environ.get("API_ENABLE_LOGGING"), context_str="API_ENABLE_LOGGING="),
            profile_validation_url=os.environ.get("WIREMOCK_BASE_URL", "http://localhost:8081"),
        )

    @classmethod
    def for_local(cls, port: int = 8080) -> "HarnessConfig":
        return HarnessConfig(base_url=f"http://localhost:{port}", timeout=10.0, retries=2, retry_delay=1.0)

    @classmethod
    def for_testing(cls, base_url: str = "") -> "HarnessConfig":
        return HarnessConfig(
            base_url=base_url or DEFAULT_BASE_URL,
            timeout=30.0,
            retries=3,
            retry_delay=2.0,
            enable_logging=True,
        )

    @classmethod
    def for_ci(cls, base_url: str = "") -> "HarnessConfig":
        return HarnessConfig(
            base_url=base_url or os.environ.get("API_BASE_URL", DEFAULT_BASE_URL),
            timeout=60.0,
            retries=5,
            retry_delay=3.0,
            enable_logging=True,
        )
