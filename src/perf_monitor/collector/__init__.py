"""Metrics aggregator, settings store and wire models."""

from perf_monitor.collector.models import (
    MetricsError,
    MetricsSnapshot,
    Settings,
)
from perf_monitor.collector.monitor import MetricsCache, PerformanceMonitor, load_sidebar_html
from perf_monitor.collector.settings_store import SettingsStore

__all__ = [
    "MetricsCache",
    "MetricsError",
    "MetricsSnapshot",
    "PerformanceMonitor",
    "Settings",
    "SettingsStore",
    "load_sidebar_html",
]
