"""Metrics aggregator: the single object every boundary adapter talks to.

PerformanceMonitor owns all mutable monitor state (settings, metrics cache,
CPU baseline, lag gauge, container detection result) so there is exactly
one of each per monitor rather than per module.

Caching:
- A cached snapshot is served while younger than half the configured
  refresh interval, so several dashboards polling at the refresh rate
  trigger at most one real sample per half interval and data is never more
  than one interval stale.
- On a failed sample the previous snapshot is served again.

Concurrency: all state is plain attributes mutated from the event loop.
Running collect() from several threads would need a lock around the cache
and CPU baseline.
"""

import platform
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path

import psutil

from perf_monitor.collector.models import (
    CpuBlock,
    DiskBlock,
    MemoryBlock,
    MetricsError,
    MetricsSnapshot,
    ProcessBlock,
    ProcessMemoryBlock,
    Settings,
    SystemBlock,
)
from perf_monitor.collector.settings_store import SettingsStore
from perf_monitor.config import AppConfig, get_settings
from perf_monitor.sensors import (
    ContainerDetector,
    CpuSampler,
    EventLoopLagProbe,
    PlatformProbe,
    SampleResult,
    read_cpu_info,
    read_process_memory,
    round_half_up,
    sample_disk_usage,
    sample_system_memory,
    select_platform_probe,
)
from perf_monitor.telemetry import (
    METRICS_CACHE_HIT,
    METRICS_COLLECTED,
    METRICS_COLLECTION_FAILED,
    SAMPLE_DEGRADED,
    get_logger,
)

log = get_logger(__name__)

SIDEBAR_PATH = Path(__file__).resolve().parent.parent / "static" / "sidebar.html"


def load_sidebar_html() -> bytes:
    """Bytes of the bundled dashboard page."""
    return SIDEBAR_PATH.read_bytes()


@dataclass(frozen=True)
class MetricsCache:
    """Single-slot cache: the last good snapshot and when it was taken."""

    snapshot: MetricsSnapshot | None = None
    timestamp_ms: int = 0

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.timestamp_ms


class PerformanceMonitor:
    """Collects metrics on demand and holds the dashboard settings.

    Args:
        config: Application configuration. Defaults to the settings singleton.
        probe: Platform probe. Selected from the running OS by default.
        detector: Container detector. Built from config and probe by default.
        process: Process whose CPU and memory are reported.
        cpu_sampler: Diff-based CPU sampler for ``process``.
        lag_probe: Event loop lag probe.
        settings_store: Settings holder.
        clock: Wall clock in seconds, used for timestamps and cache age.
        sidebar_html: Dashboard page bytes. Loaded from the package by default.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        probe: PlatformProbe | None = None,
        detector: ContainerDetector | None = None,
        process: psutil.Process | None = None,
        cpu_sampler: CpuSampler | None = None,
        lag_probe: EventLoopLagProbe | None = None,
        settings_store: SettingsStore | None = None,
        clock: Callable[[], float] = time.time,
        sidebar_html: bytes | None = None,
    ) -> None:
        config = config or get_settings()

        self.probe = probe or select_platform_probe(
            subprocess_timeout=config.subprocess_timeout_seconds
        )
        self.detector = detector or ContainerDetector(
            supports_cgroups=self.probe.supports_cgroups,
            cgroup_root=config.cgroup_root,
            docker_marker=config.docker_marker_path,
            kubernetes_marker=config.kubernetes_marker_path,
        )
        self.process = process or psutil.Process()
        self.cpu = cpu_sampler or CpuSampler(process=self.process)
        self.lag_probe = lag_probe or EventLoopLagProbe(config.lag_probe_interval_seconds)
        self.settings = settings_store or SettingsStore(
            Settings(refresh_interval_ms=config.refresh_interval_ms)
        )
        self.cache = MetricsCache()
        self._clock = clock
        self.sidebar_html = sidebar_html if sidebar_html is not None else load_sidebar_html()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start background probes. Needs a running event loop."""
        await self.lag_probe.start()

    async def stop(self) -> None:
        await self.lag_probe.stop()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self) -> Settings:
        return self.settings.get()

    def update_settings(self, partial: object) -> Settings:
        return self.settings.update(partial)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def collect(self) -> MetricsSnapshot | MetricsError:
        """Return current metrics, from cache when fresh enough.

        Never raises: a failed sample returns the previous snapshot, or a
        MetricsError when there is none.
        """
        now = self._now_ms()
        cached = self.cache.snapshot
        max_age_ms = self.settings.get().refresh_interval_ms / 2

        if cached is not None and self.cache.age_ms(now) < max_age_ms:
            log.debug(METRICS_CACHE_HIT, age_ms=self.cache.age_ms(now), max_age_ms=max_age_ms)
            return cached

        try:
            snapshot = await self._sample(now)
        except Exception as e:
            log.error(
                METRICS_COLLECTION_FAILED,
                error=str(e),
                error_type=type(e).__name__,
                serving_cached=cached is not None,
                exc_info=True,
            )
            if cached is not None:
                return cached
            return MetricsError(error=str(e) or type(e).__name__)

        self.cache = MetricsCache(snapshot=snapshot, timestamp_ms=now)
        log.debug(
            METRICS_COLLECTED,
            system_cpu_percent=snapshot.system.cpu.percent,
            process_cpu_percent=snapshot.process.cpu_percent,
            memory_used_percent=snapshot.system.memory.used_percent,
            disk_used_percent=snapshot.system.disk.used_percent,
            event_loop_lag_ms=snapshot.process.event_loop_lag_ms,
        )
        return snapshot

    def _check(self, name: str, result: SampleResult) -> None:
        if result.is_degraded:
            log.warning(SAMPLE_DEGRADED, sample=name, reason=result.reason)

    async def _sample(self, now_ms: int) -> MetricsSnapshot:
        """Run every sampler and assemble a snapshot."""
        memory = await sample_system_memory(self.detector, self.probe)
        process_cpu = self.cpu.process_percent()
        container = self.detector.detect()
        cpu_info = await read_cpu_info(container, self.probe)
        disk = await sample_disk_usage(self.probe)
        system_cpu = self.cpu.system_percent()
        process_memory = read_process_memory(self.process, memory.value.total)

        for name, result in (
            ("memory", memory),
            ("process_cpu", process_cpu),
            ("cpu_info", cpu_info),
            ("disk", disk),
            ("system_cpu", system_cpu),
            ("process_memory", process_memory),
        ):
            self._check(name, result)

        wall = self._clock()
        info = cpu_info.value
        return MetricsSnapshot(
            timestamp_ms=now_ms,
            is_containerized=container.is_containerized,
            system=SystemBlock(
                platform=self.probe.name,
                architecture=platform.machine(),
                python_version=platform.python_version(),
                cpu=CpuBlock(
                    percent=round_half_up(system_cpu.value, 1),
                    cores=info.cores,
                    effective_cores=info.effective_cores,
                    model=info.model,
                    speed_mhz=info.speed_mhz,
                ),
                memory=MemoryBlock(**asdict(memory.value)),
                disk=DiskBlock(**asdict(disk.value)),
                uptime_seconds=round_half_up(wall - psutil.boot_time(), 1),
            ),
            process=ProcessBlock(
                pid=self.process.pid,
                uptime_seconds=round_half_up(wall - self.process.create_time(), 1),
                cpu_percent=round_half_up(process_cpu.value, 1),
                memory=ProcessMemoryBlock(**asdict(process_memory.value)),
                event_loop_lag_ms=round_half_up(self.lag_probe.lag_ms, 2),
            ),
        )
