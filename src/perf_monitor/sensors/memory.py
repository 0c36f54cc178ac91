"""System, container and process memory samplers."""

import math
import tracemalloc
from dataclasses import dataclass

import psutil

from perf_monitor.sensors.container import ContainerDetector, ContainerInfo
from perf_monitor.sensors.platforms import PlatformProbe
from perf_monitor.sensors.results import ProbeError, SampleResult


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (2.5 -> 3, 0.125 -> 0.13 at two digits).

    The built-in round() sends halves to the even neighbour, which turns
    6.25% into 6.2 where dashboards expect 6.3.
    """
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def used_percent(used: int, total: int) -> float:
    """Percentage rounded half-up to one decimal; 0 when total is 0."""
    if total <= 0:
        return 0.0
    return min(round_half_up(used / total * 1000) / 10, 100.0)


@dataclass(frozen=True)
class MemoryUsage:
    """Memory block of a snapshot. `free` and `available` are equal."""

    total: int
    used: int
    free: int
    available: int
    used_percent: float

    @classmethod
    def from_total_and_free(cls, total: int, free: int) -> "MemoryUsage":
        used = max(0, total - free)
        return cls(
            total=total,
            used=used,
            free=free,
            available=free,
            used_percent=used_percent(used, total),
        )


@dataclass(frozen=True)
class ProcessMemory:
    """Memory held by the current interpreter process.

    Attributes:
        rss: Resident set size.
        heap_total: Virtual memory size.
        heap_used: Data segment size where reported, otherwise rss.
        external: Shared memory where reported, otherwise 0.
        extra_allocated: Bytes currently traced by tracemalloc (0 when off).
        percent_of_system: rss as a share of system memory total.
    """

    rss: int
    heap_total: int
    heap_used: int
    external: int
    extra_allocated: int
    percent_of_system: float


def read_container_memory(
    detector: ContainerDetector, info: ContainerInfo
) -> MemoryUsage | None:
    """Memory block against the container limit, or None when unconfined.

    An unreadable usage file counts as zero usage.
    """
    limit = info.memory_limit_bytes
    if not info.is_containerized or not limit:
        return None

    usage = detector.read_memory_usage(info) or 0
    return MemoryUsage(
        total=limit,
        used=usage,
        free=max(0, limit - usage),
        available=max(0, limit - usage),
        used_percent=used_percent(usage, limit),
    )


async def sample_system_memory(
    detector: ContainerDetector, probe: PlatformProbe
) -> SampleResult[MemoryUsage]:
    """Container memory when limited, else host memory refined by the probe.

    A probe failure falls back to psutil's raw free figure.
    """
    container_memory = read_container_memory(detector, detector.detect())
    if container_memory is not None:
        return SampleResult.ok(container_memory)

    virtual = psutil.virtual_memory()
    try:
        available = await probe.available_memory()
    except ProbeError as e:
        return SampleResult.degraded(
            MemoryUsage.from_total_and_free(virtual.total, virtual.free), str(e)
        )
    return SampleResult.ok(MemoryUsage.from_total_and_free(virtual.total, available))


def read_process_memory(
    process: psutil.Process, system_total: int
) -> SampleResult[ProcessMemory]:
    """Memory counters of ``process``."""
    try:
        info = process.memory_info()
    except psutil.Error as e:
        return SampleResult.degraded(ProcessMemory(0, 0, 0, 0, 0, 0.0), str(e))

    extra_allocated = tracemalloc.get_traced_memory()[0] if tracemalloc.is_tracing() else 0
    percent = info.rss / system_total * 100 if system_total > 0 else 0.0

    return SampleResult.ok(
        ProcessMemory(
            rss=info.rss,
            heap_total=info.vms,
            heap_used=getattr(info, "data", info.rss),
            external=getattr(info, "shared", 0),
            extra_allocated=extra_allocated,
            percent_of_system=percent,
        )
    )
