"""Base/fallback platform probe using psutil.

Every OS-specific probe derives from PlatformProbe. The base class doubles
as the generic probe for platforms without a dedicated implementation: it
reports raw free memory from psutil and the processor string from the
platform module.
"""

import asyncio
import platform
import subprocess
import sys

import psutil

from perf_monitor.sensors.results import ProbeError
from perf_monitor.telemetry import get_logger

log = get_logger(__name__)


class PlatformProbe:
    """OS capability used by the samplers.

    Attributes:
        name: Platform identifier as reported in snapshots (sys.platform style).
        supports_cgroups: Whether cgroup limits can apply on this OS.
        disk_mount: Root mount whose usage is reported.
        subprocess_timeout: Seconds allowed for helper commands.
    """

    supports_cgroups = False
    disk_mount = "/"

    def __init__(self, name: str | None = None, subprocess_timeout: float = 5.0) -> None:
        self.name = name or sys.platform
        self.subprocess_timeout = subprocess_timeout
        self._cpu_model: str | None = None
        self._cpu_model_read = False

    async def available_memory(self) -> int:
        """Bytes of memory available to new allocations.

        The generic answer is psutil's raw free figure.

        Raises:
            ProbeError: If the figure cannot be read.
        """
        try:
            return int(psutil.virtual_memory().free)
        except (OSError, RuntimeError) as e:
            raise ProbeError(f"virtual_memory unavailable: {e}") from e

    def cpu_model(self) -> str | None:
        """Human-readable model of the first CPU, cached after the first read."""
        if not self._cpu_model_read:
            try:
                self._cpu_model = self._read_cpu_model() or None
            except ProbeError as e:
                log.debug("cpu_model_unavailable", platform=self.name, error=str(e))
                self._cpu_model = None
            self._cpu_model_read = True
        return self._cpu_model

    def _read_cpu_model(self) -> str | None:
        return platform.processor()

    def run_command(self, args: list[str]) -> str:
        """Run a helper command and return its stdout.

        Raises:
            ProbeError: On a missing binary, timeout or non-zero exit.
        """
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.subprocess_timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ProbeError(f"{args[0]} failed: {e}") from e

        if result.returncode != 0:
            raise ProbeError(f"{args[0]} exited with {result.returncode}: {result.stderr[:200]}")
        return result.stdout

    async def run_command_async(self, args: list[str]) -> str:
        """run_command() off the event loop."""
        return await asyncio.to_thread(self.run_command, args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class GenericProbe(PlatformProbe):
    """Probe for platforms without a dedicated implementation."""
