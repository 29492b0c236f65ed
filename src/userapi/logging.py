"""ABOUTME: structlog configured on top of stdlib logging for the user API
ABOUTME: JSON lines in deployment, a console renderer in development, plus per-request context"""

import logging.config
from typing import Any

import structlog

from userapi import config

timestamper = structlog.processors.TimeStamper(fmt="iso")

# applied to records that come from plain stdlib loggers (werkzeug, httpx, sqlalchemy)
foreign_pre_chain = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    timestamper,
]

CONSOLE_HANDLER = "dev_console"
JSON_HANDLER = "default"

# the service's outbound profile client and the test harness both speak httpx
HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")


def _dict_config(handler: str) -> dict[str, Any]:
    def formatter(renderer: Any) -> dict[str, Any]:
        return {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": renderer,
            "foreign_pre_chain": foreign_pre_chain,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": formatter(structlog.dev.ConsoleRenderer(colors=False)),
            "json": formatter(structlog.processors.JSONRenderer()),
        },
        "handlers": {
            JSON_HANDLER: {"level": "INFO", "class": "logging.StreamHandler", "formatter": "json"},
            CONSOLE_HANDLER: {"level": "DEBUG", "class": "logging.StreamHandler", "formatter": "console"},
        },
        "loggers": {
            "": {"handlers": [handler], "level": "INFO", "propagate": True},
            # werkzeug's own access lines duplicate ours
            "werkzeug": {"level": "WARNING"},
        },
    }


handler_in_use = CONSOLE_HANDLER if config.is_development() else JSON_HANDLER
logging.config.dictConfig(_dict_config(handler_in_use))

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        timestamper,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

access_logger = structlog.get_logger("userapi.access")


def logging_setup(log_level: int = logging.INFO) -> None:
    handler = logging.getHandlerByName(handler_in_use)
    assert handler is not None
    handler.setLevel(log_level)
    logging.getLogger().setLevel(log_level)

    if config.should_log_all_requests():
        logging.getLogger().setLevel(logging.DEBUG)
        for name in HTTP_CLIENT_LOGGERS:
            http_log = logging.getLogger(name)
            http_log.setLevel(logging.DEBUG)
            http_log.propagate = True


def bind_request_context(method: str, path: str) -> None:
    """Every log line until the next request carries these."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(method=method, path=path)


def log_access(method: str, uri: str, status: int, seconds: float, response_length: int | None) -> None:
    access_logger.info(
        "request",
        method=method,
        request_uri=uri,
        status=status,
        response_length=response_length,
        request_time_seconds=f"{seconds:.6f}",
    )
