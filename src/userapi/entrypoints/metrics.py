"""ABOUTME: Prometheus instruments behind /actuator/metrics
ABOUTME: Each app owns a CollectorRegistry; actuator metric names map onto its samples"""

import os
import threading
import time
from typing import Any

from prometheus_client import CollectorRegistry, Gauge, Histogram
from sqlalchemy import event
from sqlalchemy.engine import Engine

HTTP_SERVER_REQUESTS = "http.server.requests"

# actuator name -> prometheus sample name
GAUGES = {
    "process.uptime": "process_uptime_seconds",
    "process.pid": "process_pid",
    "python.threads.live": "python_threads_live",
    "db.connection.pool.active": "db_connection_pool_active",
}


class MetricsRegistry:
    """
    Request timings and process gauges for one app.

    Each instance has its own `CollectorRegistry`, so several apps in one
    process (as in the tests) do not share counts. When an engine is given,
    `db.connection.pool.active` follows its pool checkouts and checkins.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self.registry = CollectorRegistry()
        self.started_at = time.monotonic()

        self._requests = Histogram(
            "http_server_requests_seconds",
            "Time taken to serve HTTP requests",
            ["method", "uri", "status"],
            registry=self.registry,
        )

        Gauge("process_uptime_seconds", "Seconds since the app started", registry=self.registry).set_function(
            lambda: time.monotonic() - self.started_at
        )
        Gauge("process_pid", "Process id", registry=self.registry).set(os.getpid())
        Gauge("python_threads_live", "Live Python threads", registry=self.registry).set_function(
            threading.active_count
        )
        self._pool_active = Gauge(
            "db_connection_pool_active", "Database connections checked out of the pool", registry=self.registry
        )
        if engine is not None:
            event.listen(engine, "checkout", self._on_checkout)
            event.listen(engine, "checkin", self._on_checkin)

    def _on_checkout(self, dbapi_connection: Any, connection_record: Any, connection_proxy: Any) -> None:
        self._pool_active.inc()

    def _on_checkin(self, dbapi_connection: Any, connection_record: Any) -> None:
        self._pool_active.dec()

    def record_request(self, method: str, uri: str, status: int, seconds: float) -> None:
        self._requests.labels(method=method, uri=uri, status=str(status)).observe(seconds)

    def names(self) -> list[str]:
        return sorted(GAUGES) + [HTTP_SERVER_REQUESTS]

    def _request_measurement(self) -> dict[str, Any]:
        count = 0.0
        total = 0.0
        uris = set()
        for family in self.registry.collect():
            if family.name != "http_server_requests_seconds":
                continue
            for sample in family.samples:
                if sample.name.endswith("_count"):
                    count += sample.value
                    uris.add(sample.labels["uri"])
                elif sample.name.endswith("_sum"):
                    total += sample.value
        return {
            "name": HTTP_SERVER_REQUESTS,
            "measurements": [
                {"statistic": "COUNT", "value": count},
                {"statistic": "TOTAL_TIME", "value": total},
            ],
            "availableTags": [{"tag": "uri", "values": sorted(uris)}],
        }

    def measurement(self, name: str) -> dict[str, Any] | None:
        """The body for /actuator/metrics/<name>, or None for an unknown metric."""
        if name == HTTP_SERVER_REQUESTS:
            return self._request_measurement()
        if name not in GAUGES:
            return None
        value = self.registry.get_sample_value(GAUGES[name])
        return {"name": name, "measurements": [{"statistic": "VALUE", "value": value}], "availableTags": []}
