"""HTTP service for the performance monitor."""

from perf_monitor.service.app import ROUTE_PREFIX, create_app, router

__all__ = ["ROUTE_PREFIX", "create_app", "router"]
