"""Telemetry module: structured logging via structlog and event constants."""

from perf_monitor.telemetry.events import (
    CONTAINER_DETECTED,
    LAG_PROBE_STARTED,
    LAG_PROBE_STOPPED,
    METRICS_CACHE_HIT,
    METRICS_COLLECTED,
    METRICS_COLLECTION_FAILED,
    PLATFORM_PROBE_SELECTED,
    REQUEST_FAILED,
    SAMPLE_DEGRADED,
    SERVICE_READY,
    SERVICE_STARTING,
    SERVICE_STOPPED,
    SETTINGS_UPDATED,
)
from perf_monitor.telemetry.logger import configure_logging, get_logger

__all__ = [
    "get_logger",
    "configure_logging",
    # Event constants
    "METRICS_COLLECTED",
    "METRICS_CACHE_HIT",
    "METRICS_COLLECTION_FAILED",
    "SAMPLE_DEGRADED",
    "CONTAINER_DETECTED",
    "PLATFORM_PROBE_SELECTED",
    "LAG_PROBE_STARTED",
    "LAG_PROBE_STOPPED",
    "SETTINGS_UPDATED",
    "SERVICE_STARTING",
    "SERVICE_READY",
    "SERVICE_STOPPED",
    "REQUEST_FAILED",
]
