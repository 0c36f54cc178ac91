"""Diff-based CPU accounting.

Both percentages are computed against a baseline recorded by the previous
call, so every call is a side-effecting diff step: calling faster than the
sampling cadence shrinks the window and the result tends to zero.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

import psutil

from perf_monitor.sensors.container import ContainerInfo
from perf_monitor.sensors.platforms import PlatformProbe
from perf_monitor.sensors.results import SampleResult

UNKNOWN_CPU_MODEL = "Unknown"

# Ticks that make up a core's total. iowait, softirq, steal and guest time
# are left out of both sums, so I/O wait is neither busy nor idle.
_TOTAL_FIELDS = ("user", "nice", "system", "idle", "irq", "interrupt")


def clamp_percent(value: float) -> float:
    return max(0.0, min(value, 100.0))


@dataclass
class CpuBaseline:
    """State carried between two CPU samples.

    Attributes:
        process_seconds: Cumulative user+system CPU seconds of this process.
        clock: Monotonic clock reading taken with process_seconds.
        system_idle: Idle ticks summed over all cores (None before first sample).
        system_total: All ticks summed over all cores (None before first sample).
    """

    process_seconds: float
    clock: float
    system_idle: float | None = None
    system_total: float | None = None


@dataclass(frozen=True)
class CpuInfo:
    """Static-ish CPU description."""

    cores: int
    effective_cores: float
    model: str
    speed_mhz: float


def _system_ticks(per_cpu: list) -> tuple[float, float]:
    """Sum (idle, total) over every logical core."""
    idle = 0.0
    total = 0.0
    for times in per_cpu:
        fields = times._asdict()
        total += sum(fields.get(k, 0.0) for k in _TOTAL_FIELDS)
        idle += fields.get("idle", 0.0)
    return idle, total


class CpuSampler:
    """Process and host CPU percentages measured between consecutive calls.

    Args:
        process: Process to account for. Defaults to the current process.
        clock: Monotonic clock in seconds.
        per_cpu_times: Callable returning per-core cpu_times tuples.
    """

    def __init__(
        self,
        process: psutil.Process | None = None,
        clock: Callable[[], float] = time.monotonic,
        per_cpu_times: Callable[[], list] | None = None,
    ) -> None:
        self._process = process or psutil.Process()
        self._clock = clock
        self._per_cpu_times = per_cpu_times or (lambda: psutil.cpu_times(percpu=True))
        self.baseline = CpuBaseline(process_seconds=self._process_seconds(), clock=self._clock())

    def _process_seconds(self) -> float:
        times = self._process.cpu_times()
        return times.user + times.system

    def reset(self) -> None:
        """Move the process baseline to now."""
        self.baseline.process_seconds = self._process_seconds()
        self.baseline.clock = self._clock()

    def process_percent(self) -> SampleResult[float]:
        """CPU used by this process since the previous call, in [0, 100].

        Returns 0 when no wall time has elapsed. The baseline moves to now on
        every call.
        """
        try:
            used = self._process_seconds()
        except psutil.Error as e:
            return SampleResult.degraded(0.0, f"process cpu_times unavailable: {e}")

        now = self._clock()
        elapsed = now - self.baseline.clock
        delta = used - self.baseline.process_seconds
        self.baseline.process_seconds = used
        self.baseline.clock = now

        if elapsed <= 0:
            return SampleResult.ok(0.0)
        return SampleResult.ok(clamp_percent(delta / elapsed * 100.0))

    def system_percent(self) -> SampleResult[float]:
        """Host-wide CPU busy percent since the previous call, in [0, 100].

        The first call only records the baseline and returns 0.
        """
        try:
            idle, total = _system_ticks(self._per_cpu_times())
        except (psutil.Error, OSError, RuntimeError) as e:
            return SampleResult.degraded(0.0, f"cpu_times unavailable: {e}")

        previous_idle = self.baseline.system_idle
        previous_total = self.baseline.system_total
        self.baseline.system_idle = idle
        self.baseline.system_total = total

        if previous_idle is None or previous_total is None:
            return SampleResult.ok(0.0)

        total_delta = total - previous_total
        if total_delta <= 0:
            return SampleResult.ok(0.0)
        idle_delta = idle - previous_idle
        return SampleResult.ok(clamp_percent(100.0 - 100.0 * idle_delta / total_delta))


async def read_cpu_info(container: ContainerInfo, probe: PlatformProbe) -> SampleResult[CpuInfo]:
    """Core count, container-adjusted effective cores, model and clock speed.

    The model lookup may shell out (sysctl on macOS), so it runs in a worker
    thread; the probe caches it after the first read.
    """
    try:
        cores = psutil.cpu_count(logical=True) or 0
    except (OSError, RuntimeError) as e:
        cores = 0
        reason: str | None = f"cpu_count unavailable: {e}"
    else:
        reason = None

    model = UNKNOWN_CPU_MODEL
    speed = 0.0
    if cores > 0:
        model = await asyncio.to_thread(probe.cpu_model) or UNKNOWN_CPU_MODEL
        try:
            freq = psutil.cpu_freq()
        except (OSError, RuntimeError, NotImplementedError):
            freq = None
        if freq is not None:
            speed = round(float(freq.current), 1)

    info = CpuInfo(
        cores=cores,
        effective_cores=container.cpu_limit_cores or cores,
        model=model,
        speed_mhz=speed,
    )
    if reason:
        return SampleResult.degraded(info, reason)
    return SampleResult.ok(info)
