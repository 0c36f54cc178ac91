"""Bootstrap configuration helpers (pre-settings).

Logging is configured before the Pydantic settings singleton exists, so the
two values it needs are read straight from the environment here.

Constraints:
- No telemetry imports (circular import otherwise).
- Reuse the config validators so bootstrap and settings agree.
"""

from __future__ import annotations

import os
from pathlib import Path

from perf_monitor.config.validators import resolve_path, validate_log_level


def get_bootstrap_log_level(default: str = "INFO") -> str:
    """Get logging level from environment without importing settings.

    Args:
        default: Default log level if not set or invalid.

    Returns:
        Uppercased, validated log level string.
    """
    value = os.getenv("APP_LOG_LEVEL", default)
    try:
        return validate_log_level(value)
    except ValueError:
        return validate_log_level(default)


def get_bootstrap_log_dir(default: str = "telemetry/logs") -> Path:
    """Get the log directory from ``PERF_MONITOR_LOG_DIR`` or the default.

    Args:
        default: Directory used when the variable is unset.

    Returns:
        Absolute log directory path.
    """
    return resolve_path(os.getenv("PERF_MONITOR_LOG_DIR", default))
