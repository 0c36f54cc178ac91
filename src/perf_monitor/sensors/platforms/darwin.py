"""macOS platform probe.

psutil's free figure on macOS ignores inactive and speculative pages that
the kernel hands back on demand, so available memory is rebuilt from
`vm_stat` page counts instead.
"""

import re

from perf_monitor.sensors.platforms.base import PlatformProbe
from perf_monitor.sensors.results import ProbeError

DEFAULT_PAGE_SIZE = 4096

_PAGE_SIZE_RE = re.compile(r"page size of (\d+) bytes")


def _page_count(vm_stat: str, label: str) -> int:
    match = re.search(rf"{label}:\s+(\d+)\.", vm_stat)
    return int(match.group(1)) if match else 0


def parse_vm_stat(vm_stat: str) -> int:
    """Return (free + inactive + speculative) pages times the page size.

    Missing page counters count as zero; a missing header means 4096-byte
    pages.

    Raises:
        ProbeError: If the output has none of the expected counters.
    """
    page_size_match = _PAGE_SIZE_RE.search(vm_stat)
    page_size = int(page_size_match.group(1)) if page_size_match else DEFAULT_PAGE_SIZE

    labels = ("Pages free", "Pages inactive", "Pages speculative")
    if not any(label in vm_stat for label in labels):
        raise ProbeError("vm_stat output has no page counters")

    pages = sum(_page_count(vm_stat, label) for label in labels)
    return pages * page_size


class DarwinProbe(PlatformProbe):
    """Probe backed by vm_stat and sysctl."""

    disk_mount = "/"

    def __init__(self, name: str | None = "darwin", subprocess_timeout: float = 5.0) -> None:
        super().__init__(name=name, subprocess_timeout=subprocess_timeout)

    async def available_memory(self) -> int:
        """Free + inactive + speculative memory from vm_stat.

        Raises:
            ProbeError: If vm_stat cannot be run or parsed.
        """
        output = await self.run_command_async(["vm_stat"])
        return parse_vm_stat(output)

    def _read_cpu_model(self) -> str | None:
        return self.run_command(["sysctl", "-n", "machdep.cpu.brand_string"]).strip()
