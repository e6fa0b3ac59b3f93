"""BookStack MCP Metrics Configuration.

Local metrics collection using OpenTelemetry with a Prometheus reader.
Counts tool calls, upstream API requests and rate limiter waits.
Disabled by default and always disabled under test runners.
"""

from __future__ import annotations

import json
import logging
import os
import socket
import time
from typing import Any

from opentelemetry import metrics
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST
from prometheus_client import generate_latest

logger = logging.getLogger(__name__)

# =============================================================================
# SERVICE CONFIGURATION
# =============================================================================

SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "bookstack-mcp-server")
SERVICE_VERSION = os.getenv("OTEL_SERVICE_VERSION", "1.0.0")
DEPLOYMENT_ENVIRONMENT = os.getenv("DEPLOYMENT_ENVIRONMENT", "local")


def is_test_environment() -> bool:
    """Detect if running in test environment."""
    return "PYTEST_CURRENT_TEST" in os.environ or "CI" in os.environ or "GITHUB_ACTIONS" in os.environ


METRICS_ENABLED = os.getenv("MCP_METRICS_ENABLED", "false").lower() == "true"

# Metrics instances
meter = None
tool_calls_counter = None
api_requests_counter = None
rate_limit_waits_counter = None
prometheus_reader = None

# Global state
_active_operations: dict[str, float] = {}
_metrics_initialized = False


def get_resource() -> Resource:
    """Create OpenTelemetry resource with service information."""
    return Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": SERVICE_VERSION,
            "deployment.environment": DEPLOYMENT_ENVIRONMENT,
            "host.name": socket.gethostname(),
        }
    )


def initialize_metrics():
    """Create the meter provider, Prometheus reader and counters."""
    global meter, tool_calls_counter, api_requests_counter, rate_limit_waits_counter, prometheus_reader

    if not METRICS_ENABLED:
        logger.debug("Telemetry disabled")
        return

    try:
        prometheus_reader = PrometheusMetricReader()
        meter_provider = MeterProvider(resource=get_resource(), metric_readers=[prometheus_reader])
        metrics.set_meter_provider(meter_provider)
        meter = metrics.get_meter(__name__)

        tool_calls_counter = meter.create_counter(
            name="mcp_tool_calls_total",
            description="Total number of MCP tool calls",
            unit="1",
        )
        api_requests_counter = meter.create_counter(
            name="bookstack_api_requests_total",
            description="Total number of BookStack API requests",
            unit="1",
        )
        rate_limit_waits_counter = meter.create_counter(
            name="bookstack_rate_limit_waits_total",
            description="Number of requests that waited for a rate limit token",
            unit="1",
        )
        logger.info("Metrics initialized: %s v%s (%s)", SERVICE_NAME, SERVICE_VERSION, DEPLOYMENT_ENVIRONMENT)
    except Exception as e:
        logger.warning("Metrics initialization failed: %s", e)
        meter = None


def is_metrics_enabled() -> bool:
    """Check if metrics collection is enabled."""
    return METRICS_ENABLED and meter is not None


def record_tool_call_start(tool_name: str, args: tuple, kwargs: dict) -> float | None:
    """Record start of tool call, return start time."""
    if not is_metrics_enabled():
        return None

    start_time = time.time()
    _active_operations[f"{tool_name}_{start_time}"] = start_time
    return start_time


def _finish_tool_call(tool_name: str, start_time: float | None, status: str) -> None:
    if not is_metrics_enabled():
        return

    if tool_calls_counter:
        tool_calls_counter.add(1, {"tool_name": tool_name, "status": status, "environment": DEPLOYMENT_ENVIRONMENT})
    if start_time:
        _active_operations.pop(f"{tool_name}_{start_time}", None)


def record_tool_call_success(tool_name: str, start_time: float | None, result_size: int = 0):
    """Record successful tool call."""
    _finish_tool_call(tool_name, start_time, "success")


def record_tool_call_error(tool_name: str, start_time: float | None, error: Exception):
    """Record failed tool call."""
    _finish_tool_call(tool_name, start_time, "error")


def record_api_request(method: str, status: int | None) -> None:
    """Count one upstream request; ``status`` is None for transport failures."""
    if not is_metrics_enabled() or not api_requests_counter:
        return
    api_requests_counter.add(1, {"method": method, "status": str(status) if status is not None else "none"})


def record_rate_limit_wait(wait_seconds: float) -> None:
    if not is_metrics_enabled() or not rate_limit_waits_counter:
        return
    rate_limit_waits_counter.add(1)


def get_metrics_export() -> tuple[str, str]:
    """Export metrics in Prometheus format."""
    if not is_metrics_enabled() or not prometheus_reader:
        return "# Metrics not available\n", "text/plain"

    try:
        return generate_latest().decode("utf-8"), CONTENT_TYPE_LATEST
    except Exception as e:
        return f"# Error: {e}\n", "text/plain"


def get_metrics_summary() -> dict[str, Any]:
    """Get metrics summary for debugging."""
    if not is_metrics_enabled():
        return {"status": "disabled"}

    return {
        "status": "active",
        "service_name": SERVICE_NAME,
        "service_version": SERVICE_VERSION,
        "environment": DEPLOYMENT_ENVIRONMENT,
        "active_operations": len(_active_operations),
        "prometheus_enabled": prometheus_reader is not None,
    }


def ensure_metrics_initialized(enabled: bool | None = None):
    """Initialize metrics when server starts.

    Args:
        enabled: Overrides ``MCP_METRICS_ENABLED`` when given (from settings).
    """
    global _metrics_initialized, METRICS_ENABLED
    if _metrics_initialized:
        return

    if enabled is not None:
        METRICS_ENABLED = enabled
    if METRICS_ENABLED and not is_test_environment():
        initialize_metrics()
    _metrics_initialized = True


def shutdown_metrics():
    """Shutdown metrics collection."""
    global prometheus_reader, meter
    if prometheus_reader:
        try:
            prometheus_reader.shutdown()
        except Exception as e:
            logger.debug("Prometheus reader shutdown failed: %s", e)
        prometheus_reader = None
    meter = None


def calculate_argument_size(args: tuple, kwargs: dict) -> int:
    """Calculate size of arguments in bytes."""
    try:
        return len(json.dumps(args, default=str).encode()) + len(json.dumps(kwargs, default=str).encode())
    except (TypeError, ValueError):
        return len(repr(args).encode()) + len(repr(kwargs).encode())
