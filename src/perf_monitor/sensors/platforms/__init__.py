"""Platform-specific probe implementations.

Exactly one probe is selected at startup with select_platform_probe(); the
samplers only ever talk to the PlatformProbe interface.
"""

import sys

from perf_monitor.sensors.platforms.base import GenericProbe, PlatformProbe
from perf_monitor.sensors.platforms.darwin import DarwinProbe
from perf_monitor.sensors.platforms.linux import LinuxProbe
from perf_monitor.sensors.platforms.windows import WindowsProbe
from perf_monitor.telemetry import PLATFORM_PROBE_SELECTED, get_logger

log = get_logger(__name__)


def select_platform_probe(
    platform_name: str | None = None, subprocess_timeout: float = 5.0
) -> PlatformProbe:
    """Pick the probe for the running (or given) platform.

    Args:
        platform_name: sys.platform style identifier. Defaults to sys.platform.
        subprocess_timeout: Timeout for helper commands run by the probe.

    Returns:
        LinuxProbe, DarwinProbe, WindowsProbe or GenericProbe.
    """
    name = platform_name or sys.platform

    probe: PlatformProbe
    if name.startswith("linux"):
        probe = LinuxProbe(name="linux", subprocess_timeout=subprocess_timeout)
    elif name == "darwin":
        probe = DarwinProbe(subprocess_timeout=subprocess_timeout)
    elif name in ("win32", "cygwin"):
        probe = WindowsProbe(name=name, subprocess_timeout=subprocess_timeout)
    else:
        probe = GenericProbe(name=name, subprocess_timeout=subprocess_timeout)

    log.debug(PLATFORM_PROBE_SELECTED, platform=name, probe=type(probe).__name__)
    return probe


__all__ = [
    "DarwinProbe",
    "GenericProbe",
    "LinuxProbe",
    "PlatformProbe",
    "WindowsProbe",
    "select_platform_probe",
]
