"""ABOUTME: Environment-driven settings for the user API
ABOUTME: Reads .env via python-dotenv and exposes Flask config classes per environment"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


class InvalidConfig(Exception):
    """A setting is present but unusable."""


SQLITE_DB_URI = "sqlite:///:memory:"
DEFAULT_DB_URI = "sqlite:///userapi.db"
DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"  # noqa: S105

TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
FALSE_STRINGS = frozenset({"false", "no", "off", "0", ""})


def to_bool(value: str | None, context_str: str = "") -> bool:
    """
    Parse an environment flag. Case and surrounding whitespace are ignored and
    a missing value counts as false. `context_str` prefixes the value in the
    error message, usually "NAME=".
    """
    normalised = (value or "").lower().strip()
    if normalised in TRUE_STRINGS:
        return True
    if normalised in FALSE_STRINGS:
        return False
    raise ValueError(
        f"Cannot convert '{context_str}{normalised}' to boolean. "
        f"Use one of {', '.join(sorted(TRUE_STRINGS))} or {', '.join(sorted(FALSE_STRINGS - {''}))}"
    )


def bool_environ_get(key: str, default: str = "") -> bool:
    return to_bool(os.environ.get(key, default), context_str=f"{key}=")


def get_db_uri() -> str:
    return os.environ.get("DB_URI", DEFAULT_DB_URI)


def get_log_level() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper().strip()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise InvalidConfig(f"Unknown LOG_LEVEL '{level_name}'")
    return level


def is_development() -> bool:
    return os.environ.get("FLASK_ENV", "development").lower().strip() == "development"


def should_log_all_requests() -> bool:
    return bool_environ_get("LOG_ALL_REQUESTS")


@dataclass(slots=True, kw_only=True)
class ProfileValidationCfg:
    base_url: str
    timeout: float

    @property
    def validate_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/profile/validate"

    @classmethod
    def from_env(cls) -> "ProfileValidationCfg":
        return ProfileValidationCfg(
            base_url=os.environ.get("PROFILE_VALIDATION_BASE_URL", "http://localhost:8081"),
            timeout=float(os.environ.get("PROFILE_VALIDATION_TIMEOUT", "5")),
        )


@dataclass(slots=True, kw_only=True)
class AppInfo:
    """What /actuator/info reports about this build."""

    name: str = "userapi"
    version: str = "0.1.0"
    description: str = "User management API with external profile validation"
    artifact: str = "userapi"
    group: str = "com.example"

    @classmethod
    def from_env(cls) -> "AppInfo":
        defaults = AppInfo()
        return AppInfo(
            name=os.environ.get("APP_NAME", defaults.name),
            version=os.environ.get("APP_VERSION", defaults.version),
            description=os.environ.get("APP_DESCRIPTION", defaults.description),
            artifact=os.environ.get("APP_ARTIFACT", defaults.artifact),
            group=os.environ.get("APP_GROUP", defaults.group),
        )


class FlaskBaseConfig:
    """Settings every environment shares, read when the object is built."""

    TESTING = False
    ENV_NAME = "development"

    def __init__(self) -> None:
        self.FLASK_ENV: str = self.ENV_NAME
        self.SQLALCHEMY_DATABASE_URI = get_db_uri()
        self.SECRET_KEY: str = os.environ.get("SECRET_KEY", DEFAULT_SECRET_KEY)
        self.DEBUG: bool = bool_environ_get("DEBUG")
        self.PROFILE_VALIDATION = ProfileValidationCfg.from_env()
        self.APP_INFO = AppInfo.from_env()


class FlaskConfig(FlaskBaseConfig):
    pass


class FlaskTestConfig(FlaskBaseConfig):
    """In-memory SQLite and a fixed secret key."""

    TESTING = True
    ENV_NAME = "testing"

    def __init__(self) -> None:
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = SQLITE_DB_URI
        self.SECRET_KEY = "test-secret-key-aockgn298zx081238"  # noqa: S105


class FlaskProductionConfig(FlaskConfig):
    ENV_NAME = "production"

    def __init__(self) -> None:
        super().__init__()
        if self.SECRET_KEY == DEFAULT_SECRET_KEY:
            raise InvalidConfig("SECRET_KEY must be set in production")


CONFIG_CLASSES: dict[str, type[FlaskBaseConfig]] = {
    cls.ENV_NAME: cls for cls in (FlaskConfig, FlaskTestConfig, FlaskProductionConfig)
}


def get_config(config_name: str = "") -> FlaskBaseConfig:
    """Config for `config_name`, else for FLASK_ENV. Unknown names get the development config."""
    env = (config_name.strip() or os.environ.get("FLASK_ENV", "development")).lower().strip()
    return CONFIG_CLASSES.get(env, FlaskConfig)()
