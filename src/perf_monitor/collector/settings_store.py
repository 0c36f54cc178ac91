"""In-memory dashboard settings with per-field validation.

Updates are partial and forgiving: an absent field keeps its value, a field
that fails to coerce resets to its default, and unknown keys are ignored.
Last write wins.
"""

import math
import re
from collections.abc import Callable, Mapping
from typing import Any

from perf_monitor.collector.models import Settings
from perf_monitor.telemetry import SETTINGS_UPDATED, get_logger

log = get_logger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_TRUE_STRINGS = {"true", "1", "yes", "on"}


def coerce_positive_int(value: Any) -> int | None:
    """Integer > 0 from an int, float or a string with a leading integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        number = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if not match:
            return None
        number = int(match.group(1))
    else:
        return None
    return number if number > 0 else None


def coerce_text(value: Any) -> str | None:
    """Non-blank string, stripped."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


# field name -> (accepted keys, coercion); the first key is the wire name.
_FIELDS: dict[str, tuple[tuple[str, ...], Callable[[Any], Any]]] = {
    "refresh_interval_ms": (
        ("refreshIntervalMs", "refreshInterval", "refresh_interval_ms"),
        coerce_positive_int,
    ),
    "pane_font_size_px": (
        ("paneFontSizePx", "paneFontSize", "pane_font_size_px"),
        coerce_positive_int,
    ),
    "pane_font_family": (("paneFontFamily", "pane_font_family"), coerce_text),
    "hud_size": (("hudSize", "hud_size"), coerce_text),
    "hud_theme": (("hudTheme", "hud_theme"), coerce_text),
    "hide_hud": (("hideHud", "hide_hud"), coerce_flag),
}


class SettingsStore:
    """Holder of the current Settings record.

    Args:
        defaults: Values used at startup and whenever an update is invalid.
    """

    def __init__(self, defaults: Settings | None = None) -> None:
        self.defaults = defaults or Settings()
        self._current = self.defaults

    def get(self) -> Settings:
        return self._current

    def update(self, partial: Mapping[str, Any] | Any) -> Settings:
        """Apply a partial update and return the resulting settings.

        Args:
            partial: Mapping of wire (camelCase), legacy or snake_case keys.
                Anything that is not a mapping is ignored.
        """
        if not isinstance(partial, Mapping):
            return self._current

        changes: dict[str, Any] = {}
        for field, (keys, coerce) in _FIELDS.items():
            key = next((k for k in keys if k in partial), None)
            if key is None:
                continue
            value = coerce(partial[key])
            changes[field] = getattr(self.defaults, field) if value is None else value

        if changes:
            self._current = self._current.model_copy(update=changes)
            log.info(SETTINGS_UPDATED, fields=sorted(changes))
        return self._current

    def reset(self) -> Settings:
        self._current = self.defaults
        return self._current
