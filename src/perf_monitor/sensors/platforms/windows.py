"""Windows platform probe."""

from perf_monitor.sensors.platforms.base import PlatformProbe


class WindowsProbe(PlatformProbe):
    """Probe for Windows hosts: disk usage is reported for the system drive."""

    disk_mount = "C:\\"

    def __init__(self, name: str | None = "win32", subprocess_timeout: float = 5.0) -> None:
        super().__init__(name=name, subprocess_timeout=subprocess_timeout)
