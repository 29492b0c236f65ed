"""ABOUTME: Wiring of per-app collaborators onto the Flask application
ABOUTME: Lets blueprints reach the unit of work and the profile validator"""

from flask import Flask, current_app

from userapi.bootstrap import Dependencies
from userapi.entrypoints.metrics import MetricsRegistry

EXTENSION_KEY = "userapi"
METRICS_KEY = "userapi.metrics"


def init_extensions(app: Flask, dependencies: Dependencies) -> None:
    app.extensions[EXTENSION_KEY] = dependencies
    app.extensions[METRICS_KEY] = MetricsRegistry(engine=dependencies.session_factory.kw.get("bind"))


def get_dependencies() -> Dependencies:
    dependencies = current_app.extensions[EXTENSION_KEY]
    assert isinstance(dependencies, Dependencies)
    return dependencies


def get_metrics() -> MetricsRegistry:
    metrics = current_app.extensions[METRICS_KEY]
    assert isinstance(metrics, MetricsRegistry)
    return metrics
