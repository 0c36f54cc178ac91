"""Root filesystem usage."""

import asyncio
from dataclasses import dataclass

import psutil

from perf_monitor.sensors.memory import used_percent
from perf_monitor.sensors.platforms import PlatformProbe
from perf_monitor.sensors.results import SampleResult


@dataclass(frozen=True)
class DiskUsage:
    """Disk block of a snapshot.

    `used` counts blocks not free to root; `available` counts blocks free to
    unprivileged users, so used + available can be less than total.
    """

    mount: str
    total: int
    used: int
    available: int
    used_percent: float


EMPTY_DISK_USAGE = DiskUsage(mount="/", total=0, used=0, available=0, used_percent=0.0)


async def sample_disk_usage(probe: PlatformProbe) -> SampleResult[DiskUsage]:
    """Usage of the probe's root mount, read off the event loop.

    Returns the zeroed default for "/" when the platform has no filesystem
    statistics or the read fails.
    """
    if not hasattr(psutil, "disk_usage"):
        return SampleResult.degraded(EMPTY_DISK_USAGE, "disk_usage not supported")

    mount = probe.disk_mount
    try:
        usage = await asyncio.to_thread(psutil.disk_usage, mount)
    except (OSError, RuntimeError) as e:
        return SampleResult.degraded(EMPTY_DISK_USAGE, f"disk_usage({mount}) failed: {e}")

    # psutil: used = total - free blocks, free = blocks available to non-root.
    return SampleResult.ok(
        DiskUsage(
            mount=mount,
            total=usage.total,
            used=usage.used,
            available=usage.free,
            used_percent=used_percent(usage.used, usage.total),
        )
    )
