"""Application configuration settings.

This module provides the AppConfig class and settings singleton.
"""

from pathlib import Path

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from perf_monitor.config.env_loader import Environment, get_environment, load_env_files
from perf_monitor.config.validators import (
    resolve_path,
    validate_log_format,
    validate_log_level,
    validate_service_url,
)

log = structlog.get_logger(__name__)


class AppConfig(BaseSettings):
    """Unified application configuration.

    Values come from PERF_MONITOR_* environment variables (after .env files
    are layered in by load_env_files) and fall back to the defaults below.
    """

    model_config = SettingsConfigDict(
        env_prefix="PERF_MONITOR_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    environment: Environment = Field(
        default_factory=get_environment, description="Current environment"
    )
    debug: bool = Field(default=False, alias="APP_DEBUG", description="Debug mode flag")

    # Application
    project_name: str = Field(default="Performance Monitor", description="Project name")
    version: str = Field(default="1.1.0", description="Application version")

    # Telemetry
    log_dir: Path = Field(default=Path("telemetry/logs"), description="Log directory path")
    log_level: str = Field(
        default="INFO",
        alias="APP_LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default="json", alias="APP_LOG_FORMAT", description="Log format (json or console)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        return validate_log_format(v)

    @field_validator("log_dir", mode="before")
    @classmethod
    def resolve_paths(cls, v: Path | str) -> Path:
        """Resolve relative paths to absolute."""
        return resolve_path(v)

    # Service
    service_host: str = Field(default="127.0.0.1", description="Service host address")
    service_port: int = Field(default=1880, ge=1, le=65535, description="Service port number")
    service_url: str = Field(
        default="http://127.0.0.1:1880", description="Base URL the CLI uses to reach the service"
    )

    @field_validator("service_url")
    @classmethod
    def validate_service_url(cls, v: str) -> str:
        """Validate service URL."""
        return validate_service_url(v)

    # Sampling
    refresh_interval_ms: int = Field(
        default=2000, gt=0, description="Initial dashboard refresh interval (milliseconds)"
    )
    lag_probe_interval_seconds: float = Field(
        default=1.0, gt=0, description="Event loop lag probe interval"
    )
    subprocess_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Timeout for platform helper commands (vm_stat, sysctl)"
    )

    # Container detection
    cgroup_root: Path = Field(
        default=Path("/sys/fs/cgroup"), description="Root of the cgroup filesystem"
    )
    docker_marker_path: Path = Field(
        default=Path("/.dockerenv"), description="File present inside Docker containers"
    )
    kubernetes_marker_path: Path = Field(
        default=Path("/var/run/secrets/kubernetes.io"),
        description="Service-account directory present inside Kubernetes pods",
    )


_settings: AppConfig | None = None


def load_app_config() -> AppConfig:
    """Load and validate application configuration.

    Returns:
        Validated AppConfig instance.

    Raises:
        ValidationError: If configuration validation fails.
    """
    log.info("loading_app_config", environment=get_environment().value)

    load_env_files()

    try:
        config = AppConfig()
        log.info(
            "app_config_loaded",
            environment=config.environment.value,
            debug=config.debug,
            log_level=config.log_level,
            refresh_interval_ms=config.refresh_interval_ms,
        )
        return config
    except Exception as e:
        log.error("app_config_load_failed", error=str(e), error_type=type(e).__name__)
        raise


def get_settings() -> AppConfig:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = load_app_config()
    return _settings
