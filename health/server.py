"""
health.server
AUTHOR: carter-vin

HTTP surface (aiohttp)

- GET /health -> JSON report; 200 for healthy/warning, 500 for error
- response time middleware -> slow_response events, never touches reports
"""

from __future__ import annotations

import time

from aiohttp import web

from health import SERVICE_VERSION
from health.aggregator import HealthAggregator
from health.config import Settings, ThresholdConfig
from health.evaluate import STATUS_ERROR
from health.logging import emit_event
from health.model import ErrorReport, report_to_json, utc_now_iso

AGGREGATOR_KEY = web.AppKey("aggregator", HealthAggregator)

HEALTH_ROUTE = "/health"


def make_response_time_middleware(threshold_ms: float):
    """
    Build middleware that reports requests slower than threshold_ms
    """

    @web.middleware
    async def response_time_middleware(request: web.Request, handler):
        start = time.monotonic()
        try:
            return await handler(request)
        finally:
            duration_ms = int((time.monotonic() - start) * 1000)
            if duration_ms > threshold_ms:
                emit_event(
                    "slow_response",
                    service_version=SERVICE_VERSION,
                    method=request.method,
                    path=request.path_qs,
                    duration_ms=duration_ms,
                    threshold_ms=threshold_ms,
                )

    return response_time_middleware


async def health_handler(request: web.Request) -> web.Response:
    """
    Map the aggregated report onto an HTTP response
    """
    aggregator = request.app[AGGREGATOR_KEY]

    try:
        report = await aggregator.check_system_health()
        body = report_to_json(report)
    except Exception as e:
        # Includes serialization faults such as non-finite metrics
        report = ErrorReport(timestamp=utc_now_iso(), error=str(e) or type(e).__name__)
        body = report_to_json(report)

    if report.status == STATUS_ERROR:
        emit_event(
            "health_check_failed",
            service_version=SERVICE_VERSION,
            message=report.error,
        )
        return web.Response(text=body, status=500, content_type="application/json")

    emit_event(
        "health_check_completed",
        service_version=SERVICE_VERSION,
        status=report.status,
        warnings=len(report.warnings),
    )
    return web.Response(text=body, status=200, content_type="application/json")


def create_app(
    aggregator: HealthAggregator | None = None,
    *,
    thresholds: ThresholdConfig | None = None,
) -> web.Application:
    """
    Build the aiohttp application

    The middleware uses the aggregator's thresholds unless overridden.
    """
    if aggregator is None:
        aggregator = HealthAggregator(thresholds)
    if thresholds is None:
        thresholds = aggregator.thresholds

    app = web.Application(
        middlewares=[make_response_time_middleware(thresholds.response_time_threshold_ms)]
    )
    app[AGGREGATOR_KEY] = aggregator
    app.router.add_get(HEALTH_ROUTE, health_handler)
    return app


def create_app_from_settings(settings: Settings) -> web.Application:
    return create_app(HealthAggregator.from_settings(settings))
