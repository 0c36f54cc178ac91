"""Pydantic models for snapshots and settings.

Fields are snake_case in Python and camelCase on the wire, which is what the
dashboard page reads.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_REFRESH_INTERVAL_MS = 2000
DEFAULT_PANE_FONT_SIZE_PX = 12
DEFAULT_PANE_FONT_FAMILY = "Helvetica Neue"
DEFAULT_HUD_SIZE = "Normal"
DEFAULT_HUD_THEME = "classic"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Metrics
# ============================================================================


class CpuBlock(_WireModel):
    """Host CPU figures."""

    percent: float = Field(ge=0, le=100)
    cores: int
    effective_cores: float
    model: str
    speed_mhz: float = Field(alias="speedMHz")


class MemoryBlock(_WireModel):
    """System (or container) memory in bytes."""

    total: int
    used: int
    free: int
    available: int
    used_percent: float = Field(ge=0, le=100)


class DiskBlock(_WireModel):
    """Root filesystem usage in bytes."""

    mount: str
    total: int
    used: int
    available: int
    used_percent: float = Field(ge=0, le=100)


class SystemBlock(_WireModel):
    """Host-wide part of a snapshot."""

    platform: str
    architecture: str
    python_version: str
    cpu: CpuBlock
    memory: MemoryBlock
    disk: DiskBlock
    uptime_seconds: float


class ProcessMemoryBlock(_WireModel):
    """Memory held by the monitored process in bytes."""

    rss: int
    heap_total: int
    heap_used: int
    external: int
    extra_allocated: int
    percent_of_system: float


class ProcessBlock(_WireModel):
    """Process part of a snapshot."""

    pid: int
    uptime_seconds: float
    cpu_percent: float = Field(ge=0, le=100)
    memory: ProcessMemoryBlock
    event_loop_lag_ms: float


class MetricsSnapshot(_WireModel):
    """One complete metrics sample, fresh or served from cache."""

    timestamp_ms: int
    is_containerized: bool
    system: SystemBlock
    process: ProcessBlock


class MetricsError(_WireModel):
    """Returned instead of a snapshot when nothing could be collected."""

    error: str


# ============================================================================
# Settings
# ============================================================================


class Settings(_WireModel):
    """Dashboard settings. Only refresh_interval_ms affects collection."""

    refresh_interval_ms: int = Field(default=DEFAULT_REFRESH_INTERVAL_MS, gt=0)
    pane_font_size_px: int = Field(default=DEFAULT_PANE_FONT_SIZE_PX, gt=0)
    pane_font_family: str = DEFAULT_PANE_FONT_FAMILY
    hud_size: str = DEFAULT_HUD_SIZE
    hud_theme: str = DEFAULT_HUD_THEME
    hide_hud: bool = False
