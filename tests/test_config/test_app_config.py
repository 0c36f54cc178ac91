"""Tests for application configuration."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

import perf_monitor.config.settings as settings_module
from perf_monitor.config import (
    AppConfig,
    Environment,
    get_environment,
    get_settings,
    load_env_files,
)
from perf_monitor.config.bootstrap import get_bootstrap_log_dir, get_bootstrap_log_level
from perf_monitor.config.validators import resolve_path, validate_service_url


class TestEnvironmentDetection:
    """Test APP_ENV detection."""

    def test_default_is_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("APP_ENV", raising=False)
        assert get_environment() == Environment.DEVELOPMENT

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("production", Environment.PRODUCTION),
            ("prod", Environment.PRODUCTION),
            ("staging", Environment.STAGING),
            ("stage", Environment.STAGING),
            ("test", Environment.TEST),
            ("something", Environment.DEVELOPMENT),
        ],
    )
    def test_aliases(
        self, monkeypatch: pytest.MonkeyPatch, value: str, expected: Environment
    ) -> None:
        monkeypatch.setenv("APP_ENV", value)
        assert get_environment() == expected


class TestAppConfig:
    """Test AppConfig defaults and environment overrides."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Code defaults, isolated from .env and the shell."""
        for name in (
            "APP_ENV",
            "APP_LOG_LEVEL",
            "APP_LOG_FORMAT",
            "APP_DEBUG",
            "PERF_MONITOR_REFRESH_INTERVAL_MS",
            "PERF_MONITOR_SERVICE_URL",
        ):
            monkeypatch.delenv(name, raising=False)

        config = AppConfig()

        assert config.environment == Environment.DEVELOPMENT
        assert config.debug is False
        assert config.project_name == "Performance Monitor"
        assert config.log_level == "INFO"
        assert config.log_format == "json"
        assert config.service_port == 1880
        assert config.service_url == "http://127.0.0.1:1880"
        assert config.refresh_interval_ms == 2000
        assert config.lag_probe_interval_seconds == 1.0
        assert config.subprocess_timeout_seconds == 5.0
        assert config.cgroup_root == Path("/sys/fs/cgroup")

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERF_MONITOR_REFRESH_INTERVAL_MS", "500")
        monkeypatch.setenv("PERF_MONITOR_SERVICE_URL", "http://monitor:9000/")
        monkeypatch.setenv("APP_LOG_LEVEL", "debug")
        monkeypatch.setenv("APP_DEBUG", "1")

        config = AppConfig()

        assert config.refresh_interval_ms == 500
        assert config.service_url == "http://monitor:9000"
        assert config.log_level == "DEBUG"
        assert config.debug is True

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            AppConfig()

    def test_invalid_log_format(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            AppConfig()

    def test_non_positive_refresh_interval(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERF_MONITOR_REFRESH_INTERVAL_MS", "0")
        with pytest.raises(ValidationError):
            AppConfig()

    def test_log_dir_is_absolute(self) -> None:
        assert AppConfig().log_dir.is_absolute()


class TestValidators:
    def test_service_url_scheme(self) -> None:
        with pytest.raises(ValueError):
            validate_service_url("ftp://example.com")

    def test_resolve_relative_path(self) -> None:
        resolved = resolve_path("telemetry/logs")
        assert resolved.is_absolute()
        assert resolved.parts[-2:] == ("telemetry", "logs")


class TestBootstrap:
    def test_invalid_level_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_LOG_LEVEL", "chatty")
        assert get_bootstrap_log_level() == "INFO"

    def test_log_dir_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("PERF_MONITOR_LOG_DIR", str(tmp_path / "logs"))
        assert get_bootstrap_log_dir() == (tmp_path / "logs").resolve()


class TestSingleton:
    def test_get_settings_returns_singleton(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings_module, "_settings", None)

        first = get_settings()

        assert get_settings() is first
        assert isinstance(first, AppConfig)


class TestEnvFileLoading:
    """Test layered .env loading."""

    def test_priority(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("PERF_MONITOR_TEST_VAR=base\n")
        (tmp_path / ".env.local").write_text("PERF_MONITOR_TEST_VAR=local\n")
        (tmp_path / ".env.development").write_text("PERF_MONITOR_TEST_VAR=development\n")
        (tmp_path / ".env.development.local").write_text(
            "PERF_MONITOR_TEST_VAR=development_local\n"
        )
        monkeypatch.setenv("APP_ENV", "development")
        monkeypatch.setenv("PERF_MONITOR_TEST_VAR", "unset")
        monkeypatch.delenv("PERF_MONITOR_TEST_VAR")

        loaded = load_env_files(tmp_path)

        assert os.environ["PERF_MONITOR_TEST_VAR"] == "development_local"
        assert loaded[0] == ".env.development.local"
        assert len(loaded) == 4

    def test_process_environment_wins(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        (tmp_path / ".env").write_text("PERF_MONITOR_TEST_VAR=from_file\n")
        monkeypatch.setenv("PERF_MONITOR_TEST_VAR", "from_shell")

        load_env_files(tmp_path)

        assert os.environ["PERF_MONITOR_TEST_VAR"] == "from_shell"

    def test_no_files(self, tmp_path: Path) -> None:
        assert load_env_files(tmp_path) == []
