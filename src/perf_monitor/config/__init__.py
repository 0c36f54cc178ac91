"""Configuration management for the performance monitor.

Environment variables (PERF_MONITOR_*), layered .env files and code defaults
are combined into a single validated AppConfig.
"""

from perf_monitor.config.env_loader import Environment, get_environment, load_env_files
from perf_monitor.config.settings import AppConfig, get_settings, load_app_config

__all__ = [
    "AppConfig",
    "Environment",
    "get_environment",
    "get_settings",
    "load_app_config",
    "load_env_files",
]
