"""ABOUTME: Operational endpoints under /actuator
ABOUTME: Health with per-component status, build info, request metrics and a few diagnostic views"""

import logging
import platform
import shutil
from collections.abc import Callable
from typing import Any

import structlog
from flask import Blueprint, current_app, jsonify
from flask.typing import ResponseReturnValue
from sqlalchemy.exc import SQLAlchemyError

from userapi.config import AppInfo
from userapi.entrypoints.errors import error_response
from userapi.entrypoints.extensions import get_dependencies, get_metrics
from userapi.service_layer import user_service

actuator_bp = Blueprint("actuator", __name__, url_prefix="/actuator")

logger = structlog.get_logger(__name__)

UP = "UP"
DOWN = "DOWN"

DISK_FREE_THRESHOLD = 10 * 1024 * 1024


def check_database() -> dict[str, Any]:
    """Check database connectivity, reporting the user count when it works."""
    try:
        user_count = user_service.count_users(get_dependencies().uow())
    except SQLAlchemyError as error:
        logger.warning("database health check failed", error=str(error))
        return {"status": DOWN, "details": {"error": str(error)}}
    return {"status": UP, "details": {"database": "SQL", "userCount": user_count}}


def check_disk_space() -> dict[str, Any]:
    usage = shutil.disk_usage(".")
    status = UP if usage.free > DISK_FREE_THRESHOLD else DOWN
    return {
        "status": status,
        "details": {"total": usage.total, "free": usage.free, "threshold": DISK_FREE_THRESHOLD},
    }


@actuator_bp.route("/health")
def health() -> ResponseReturnValue:
    """
    Overall health plus per-component status.

    HTTP status 200 when every component is UP, 503 otherwise.
    """
    components = {
        "db": check_database(),
        "diskSpace": check_disk_space(),
        "ping": {"status": UP},
    }
    overall = UP if all(c["status"] == UP for c in components.values()) else DOWN
    return jsonify({"status": overall, "components": components}), 200 if overall == UP else 503


@actuator_bp.route("/info")
def info() -> ResponseReturnValue:
    app_info: AppInfo = current_app.config["APP_INFO"]
    return jsonify({
        "application": {
            "name": app_info.name,
            "version": app_info.version,
            "description": app_info.description,
        },
        "build": {
            "artifact": app_info.artifact,
            "group": app_info.group,
            "name": app_info.name,
            "version": app_info.version,
        },
        "python": {"version": platform.python_version(), "implementation": platform.python_implementation()},
    })


@actuator_bp.route("/metrics")
def metrics() -> ResponseReturnValue:
    return jsonify({"names": get_metrics().names()})


@actuator_bp.route("/metrics/<name>")
def metric(name: str) -> ResponseReturnValue:
    measurement = get_metrics().measurement(name)
    if measurement is None:
        return error_response(404, "Not Found", f"Metric {name} not found")
    return jsonify(measurement)


def _env() -> dict[str, Any]:
    app_config = current_app.config
    return {
        "activeProfiles": [app_config.get("FLASK_ENV", "development")],
        "properties": {
            "debug": app_config.get("DEBUG", False),
            "testing": app_config.get("TESTING", False),
            "profileValidation.baseUrl": app_config["PROFILE_VALIDATION"].base_url,
            "profileValidation.timeout": app_config["PROFILE_VALIDATION"].timeout,
        },
    }


def _loggers() -> dict[str, Any]:
    levels = {}
    for name in sorted(logging.root.manager.loggerDict):
        log = logging.getLogger(name)
        levels[name] = {"effectiveLevel": logging.getLevelName(log.getEffectiveLevel())}
    return {"root": {"effectiveLevel": logging.getLevelName(logging.root.level)}, "loggers": levels}


def _mappings() -> dict[str, Any]:
    rules = [
        {"rule": rule.rule, "methods": sorted((rule.methods or set()) - {"HEAD", "OPTIONS"}), "endpoint": rule.endpoint}
        for rule in current_app.url_map.iter_rules()
    ]
    return {"mappings": sorted(rules, key=lambda r: r["rule"])}


EXTRA_ENDPOINTS: dict[str, Callable[[], dict[str, Any]]] = {
    "env": _env,
    "loggers": _loggers,
    "mappings": _mappings,
}


@actuator_bp.route("/<name>")
def endpoint(name: str) -> ResponseReturnValue:
    view = EXTRA_ENDPOINTS.get(name)
    if view is None:
        return error_response(404, "Not Found", f"Actuator endpoint {name} not found")
    return jsonify(view())


@actuator_bp.route("")
def index() -> ResponseReturnValue:
    """List the available actuator endpoints."""
    names = ["health", "info", "metrics", *EXTRA_ENDPOINTS]
    return jsonify({"_links": {name: {"href": f"/actuator/{name}"} for name in names}})
