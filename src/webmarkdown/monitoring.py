"""Prometheus metrics for conversions and upstream failures."""

from __future__ import annotations

import logging

from prometheus_client import Counter, start_http_server

logger = logging.getLogger(__name__)

CONVERSIONS = Counter(
    "webmd_conversions_total",
    "Conversion requests by response mode and outcome",
    labelnames=("mode", "outcome"),
)
UPSTREAM_FAILURES = Counter(
    "webmd_upstream_failures_total",
    "Upstream fetches rejected before conversion",
    labelnames=("reason",),
)

_metrics_started = False


def ensure_metrics_server(port: int) -> None:
    global _metrics_started
    if _metrics_started:
        return
    start_http_server(port)
    _metrics_started = True
    logger.info("Prometheus metrics server started", extra={"port": port})


def record_conversion(mode: str, outcome: str) -> None:
    CONVERSIONS.labels(mode=mode, outcome=outcome).inc()


def record_upstream_failure(reason: str) -> None:
    UPSTREAM_FAILURES.labels(reason=reason).inc()
