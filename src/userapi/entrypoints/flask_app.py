"""ABOUTME: Flask application factory with configuration, blueprints, and error handling
ABOUTME: Creates and configures the user API app with its database and profile validator"""

import time

from flask import Flask, Response, g, request
from flask.typing import ResponseReturnValue
from sqlalchemy.orm import sessionmaker
from werkzeug.exceptions import HTTPException

import userapi.logging
from userapi import bootstrap, config
from userapi.adapters.profile_validation import AbstractProfileValidator
from userapi.entrypoints.errors import error_response
from userapi.entrypoints.extensions import get_metrics, init_extensions


def create_app(
    config_name: str = "",
    session_factory: sessionmaker | None = None,
    profile_validator: AbstractProfileValidator | None = None,
) -> Flask:
    """
    Flask application factory.

    Args:
        config_name: Configuration name (development, testing, production)
        session_factory: use this instead of one built from the configured database URI
        profile_validator: use this instead of calling the configured validation service

    Returns:
        Configured Flask application instance
    """
    userapi.logging.logging_setup(config.get_log_level())

    app = Flask(__name__)

    # Load configuration
    flask_config = config.get_config(config_name)
    app.config.from_object(flask_config)

    dependencies = bootstrap.bootstrap(
        database_url=flask_config.SQLALCHEMY_DATABASE_URI,
        session_factory=session_factory,
        profile_validator=profile_validator,
        profile_cfg=flask_config.PROFILE_VALIDATION,
    )
    init_extensions(app, dependencies)

    register_blueprints(app)
    register_error_handlers(app)
    register_request_hooks(app)

    app.logger.info("User API application startup")

    return app


def register_blueprints(app: Flask) -> None:
    """Register application blueprints."""
    from .blueprints.actuator import actuator_bp
    from .blueprints.users import users_bp

    app.register_blueprint(users_bp)
    app.register_blueprint(actuator_bp)


def register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers for HTTP errors raised outside the blueprints."""

    @app.errorhandler(404)
    def not_found(error: HTTPException) -> ResponseReturnValue:
        return error_response(404, "Not Found", f"No endpoint {request.method} {request.path}")

    @app.errorhandler(405)
    def method_not_allowed(error: HTTPException) -> ResponseReturnValue:
        return error_response(405, "Method Not Allowed", f"Method {request.method} not allowed for {request.path}")

    @app.errorhandler(500)
    def internal_error(error: HTTPException) -> ResponseReturnValue:
        app.logger.error(f"Server Error: {error}")
        return error_response(500, "Internal Server Error", "An unexpected error occurred")


def register_request_hooks(app: Flask) -> None:
    """Time each request, count it under http.server.requests and write an access log line."""

    @app.before_request
    def start_timer() -> None:
        g.request_started = time.perf_counter()
        userapi.logging.bind_request_context(request.method, request.path)

    @app.after_request
    def record_request(response: Response) -> Response:
        started = g.get("request_started")
        elapsed = time.perf_counter() - started if started is not None else 0.0
        uri = request.url_rule.rule if request.url_rule is not None else "UNKNOWN"
        get_metrics().record_request(request.method, uri, response.status_code, elapsed)
        userapi.logging.log_access(
            request.method, request.full_path.rstrip("?"), response.status_code, elapsed, response.content_length
        )
        return response
