"""Resource samplers.

Structure:
- container.py: cgroup v1/v2 container detection (cached)
- cpu.py: diff-based process and host CPU percentages, CPU info
- memory.py: container-aware system memory, process memory
- disk.py: root filesystem usage
- lag.py: event loop lag probe
- platforms/: per-OS probes (Linux, macOS, Windows, generic)
- results.py: SampleResult outcomes and error types
"""

from perf_monitor.sensors.container import (
    CgroupVersion,
    ContainerDetector,
    ContainerInfo,
)
from perf_monitor.sensors.cpu import CpuBaseline, CpuInfo, CpuSampler, read_cpu_info
from perf_monitor.sensors.disk import EMPTY_DISK_USAGE, DiskUsage, sample_disk_usage
from perf_monitor.sensors.lag import EventLoopLagProbe
from perf_monitor.sensors.memory import (
    MemoryUsage,
    ProcessMemory,
    read_container_memory,
    read_process_memory,
    round_half_up,
    sample_system_memory,
    used_percent,
)
from perf_monitor.sensors.platforms import PlatformProbe, select_platform_probe
from perf_monitor.sensors.results import MonitorError, ProbeError, SampleResult, SampleStatus

__all__ = [
    "CgroupVersion",
    "ContainerDetector",
    "ContainerInfo",
    "CpuBaseline",
    "CpuInfo",
    "CpuSampler",
    "DiskUsage",
    "EMPTY_DISK_USAGE",
    "EventLoopLagProbe",
    "MemoryUsage",
    "MonitorError",
    "PlatformProbe",
    "ProbeError",
    "ProcessMemory",
    "SampleResult",
    "SampleStatus",
    "read_container_memory",
    "read_cpu_info",
    "read_process_memory",
    "round_half_up",
    "sample_disk_usage",
    "sample_system_memory",
    "select_platform_probe",
    "used_percent",
]
