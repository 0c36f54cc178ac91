"""Linux platform probe.

Available memory comes from the kernel's own estimate (`MemAvailable` in
/proc/meminfo), which accounts for reclaimable page cache; psutil's raw
`free` figure would make a healthy host look almost full.
"""

import re
from pathlib import Path

from perf_monitor.sensors.platforms.base import PlatformProbe
from perf_monitor.sensors.results import ProbeError

MEMINFO_PATH = Path("/proc/meminfo")
CPUINFO_PATH = Path("/proc/cpuinfo")

_MEM_AVAILABLE_RE = re.compile(r"^MemAvailable:\s+(\d+)\s+kB", re.MULTILINE)
_MODEL_NAME_RE = re.compile(r"^model name\s*:\s*(.+)$", re.MULTILINE)


def parse_mem_available(meminfo: str) -> int | None:
    """Return MemAvailable in bytes, or None when the field is missing."""
    match = _MEM_AVAILABLE_RE.search(meminfo)
    if not match:
        return None
    return int(match.group(1)) * 1024


def parse_cpu_model(cpuinfo: str) -> str | None:
    """Return the first `model name` entry of /proc/cpuinfo."""
    match = _MODEL_NAME_RE.search(cpuinfo)
    return match.group(1).strip() if match else None


class LinuxProbe(PlatformProbe):
    """Probe backed by procfs."""

    supports_cgroups = True
    disk_mount = "/"

    def __init__(
        self,
        name: str | None = "linux",
        subprocess_timeout: float = 5.0,
        meminfo_path: Path = MEMINFO_PATH,
        cpuinfo_path: Path = CPUINFO_PATH,
    ) -> None:
        super().__init__(name=name, subprocess_timeout=subprocess_timeout)
        self.meminfo_path = meminfo_path
        self.cpuinfo_path = cpuinfo_path

    async def available_memory(self) -> int:
        """MemAvailable from /proc/meminfo.

        Raises:
            ProbeError: If the file is unreadable or lacks the field.
        """
        try:
            text = self.meminfo_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ProbeError(f"cannot read {self.meminfo_path}: {e}") from e

        available = parse_mem_available(text)
        if available is None:
            raise ProbeError(f"MemAvailable missing from {self.meminfo_path}")
        return available

    def _read_cpu_model(self) -> str | None:
        try:
            text = self.cpuinfo_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ProbeError(f"cannot read {self.cpuinfo_path}: {e}") from e
        # ARM boards often omit "model name"; fall back to the processor string.
        return parse_cpu_model(text) or super()._read_cpu_model()
