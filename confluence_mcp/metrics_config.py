"""Prometheus metrics for the Confluence MCP server.

Instruments, all created on an OpenTelemetry meter read by a Prometheus reader:

- ``mcp_tool_calls_total``: tool calls by tool name and status
- ``mcp_tool_duration_seconds``: wall time of each tool call
- ``patch_update_outcomes_total``: ``confluence_patch_update`` results by status

Collection is off under pytest and CI unless ``MCP_METRICS_ENABLED=true``.
Every ``record_*`` function is a no-op while it is off.
"""

from __future__ import annotations

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

from . import __version__

SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "confluence-mcp")
DEPLOYMENT_ENVIRONMENT = os.getenv("DEPLOYMENT_ENVIRONMENT", "local")


def is_test_environment() -> bool:
    """Detect if running under pytest or a CI runner."""
    return any(name in os.environ for name in ("PYTEST_CURRENT_TEST", "CI", "GITHUB_ACTIONS"))


def _enabled_from_env() -> bool:
    default = "false" if is_test_environment() else "true"
    return os.getenv("MCP_METRICS_ENABLED", default).lower() == "true"


METRICS_ENABLED = _enabled_from_env()

meter = None
prometheus_reader = None
tool_calls_counter = None
tool_duration_histogram = None
patch_outcomes_counter = None

_metrics_initialized = False
_outcome_totals: dict[str, int] = {}


def get_resource() -> Resource:
    return Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": __version__,
            "deployment.environment": DEPLOYMENT_ENVIRONMENT,
            "host.name": socket.gethostname(),
        }
    )


def initialize_metrics() -> None:
    """Create the meter provider and the three instruments."""
    global meter, prometheus_reader, tool_calls_counter, tool_duration_histogram, patch_outcomes_counter

    if not METRICS_ENABLED:
        return

    prometheus_reader = PrometheusMetricReader()
    metrics.set_meter_provider(MeterProvider(resource=get_resource(), metric_readers=[prometheus_reader]))
    meter = metrics.get_meter("confluence_mcp")

    tool_calls_counter = meter.create_counter(
        name="mcp_tool_calls_total",
        description="MCP tool calls by tool and status",
        unit="1",
    )
    tool_duration_histogram = meter.create_histogram(
        name="mcp_tool_duration_seconds",
        description="Wall time of MCP tool calls",
        unit="s",
    )
    patch_outcomes_counter = meter.create_counter(
        name="patch_update_outcomes_total",
        description="Patch-update outcomes by status",
        unit="1",
    )


def is_metrics_enabled() -> bool:
    return METRICS_ENABLED and meter is not None


def record_tool_call_start(tool_name: str, args: tuple, kwargs: dict) -> float | None:
    """Return the start timestamp passed back to the success/error recorders."""
    if not is_metrics_enabled():
        return None
    return time.perf_counter()


def _finish_tool_call(tool_name: str, start_time: float | None, status: str) -> None:
    attributes = {"tool_name": tool_name, "status": status, "environment": DEPLOYMENT_ENVIRONMENT}
    if tool_calls_counter is not None:
        tool_calls_counter.add(1, attributes)
    if tool_duration_histogram is not None and start_time is not None:
        tool_duration_histogram.record(time.perf_counter() - start_time, attributes)


def record_tool_call_success(tool_name: str, start_time: float | None, result_size: int = 0) -> None:
    if is_metrics_enabled():
        _finish_tool_call(tool_name, start_time, "success")


def record_tool_call_error(tool_name: str, start_time: float | None, error: Exception) -> None:
    if is_metrics_enabled():
        _finish_tool_call(tool_name, start_time, "error")


def record_patch_outcome(status: str) -> None:
    """Count one patch-update outcome ("success", "conflict-detected", "no-changes")."""
    if not is_metrics_enabled():
        return
    _outcome_totals[status] = _outcome_totals.get(status, 0) + 1
    if patch_outcomes_counter is not None:
        patch_outcomes_counter.add(1, {"status": status, "environment": DEPLOYMENT_ENVIRONMENT})


def get_metrics_export() -> tuple[str, str]:
    """Return the Prometheus exposition text and its content type."""
    if not is_metrics_enabled() or prometheus_reader is None:
        return "# Metrics not available\n", "text/plain"
    return generate_latest().decode("utf-8"), CONTENT_TYPE_LATEST


def get_metrics_summary() -> dict[str, Any]:
    if not is_metrics_enabled():
        return {"status": "disabled"}
    return {
        "status": "active",
        "service_name": SERVICE_NAME,
        "service_version": __version__,
        "environment": DEPLOYMENT_ENVIRONMENT,
        "patch_outcomes": dict(_outcome_totals),
        "prometheus_enabled": prometheus_reader is not None,
    }


def ensure_metrics_initialized() -> None:
    """Initialize metrics once, at server start."""
    global _metrics_initialized
    if _metrics_initialized:
        return
    if METRICS_ENABLED and not is_test_environment():
        initialize_metrics()
    _metrics_initialized = True
