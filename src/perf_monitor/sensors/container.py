"""Container environment detection from the cgroup filesystem.

Inside Docker or Kubernetes the host-wide figures psutil reports are
misleading: a pod limited to 1 GiB on a 64 GiB node would show as nearly
idle. The detector probes cgroup v2 first (the default of current container
runtimes), then cgroup v1, and finally the Docker/Kubernetes marker files.

Detection runs once per detector and is cached. Every filesystem read is
best-effort: a missing file, a permission error or unparseable content all
mean "this signal is absent", never an exception.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import psutil

from perf_monitor.telemetry import CONTAINER_DETECTED, get_logger

log = get_logger(__name__)

CGROUP_ROOT = Path("/sys/fs/cgroup")
DOCKER_MARKER = Path("/.dockerenv")
KUBERNETES_MARKER = Path("/var/run/secrets/kubernetes.io")

# cgroup v2 files (relative to the cgroup root)
V2_MEMORY_MAX = "memory.max"
V2_MEMORY_CURRENT = "memory.current"
V2_CPU_MAX = "cpu.max"
V2_NO_LIMIT = "max"

# cgroup v1 files (relative to the cgroup root)
V1_MEMORY_LIMIT = "memory/memory.limit_in_bytes"
V1_MEMORY_USAGE = "memory/memory.usage_in_bytes"
V1_CPU_QUOTA = "cpu/cpu.cfs_quota_us"
V1_CPU_PERIOD = "cpu/cpu.cfs_period_us"

# v1 reports "no limit" as the largest page-aligned signed 64-bit value.
V1_NO_LIMIT_THRESHOLD = 9223372036854771712


class CgroupVersion(str, Enum):
    """cgroup hierarchy the limits were read from."""

    NONE = "none"
    V1 = "v1"
    V2 = "v2"


@dataclass(frozen=True)
class ContainerInfo:
    """Result of container detection.

    A NONE cgroup version never carries limits; a container recognised only
    by its marker files is containerized without limits.
    """

    is_containerized: bool = False
    cgroup_version: CgroupVersion = CgroupVersion.NONE
    memory_limit_bytes: int | None = None
    cpu_limit_cores: float | None = None

    @classmethod
    def unconfined(cls) -> "ContainerInfo":
        return cls()


def _read_text(path: Path) -> str | None:
    """Read and strip a small control file, returning None on any OS error."""
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError:
        return None


def _read_int(path: Path) -> int | None:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        return False


def parse_cpu_max(raw: str | None) -> float | None:
    """Parse cgroup v2 `cpu.max` ("<quota> <period>") into cores.

    Returns None for "max", malformed content or a non-positive quota/period.
    """
    if not raw:
        return None
    parts = raw.split()
    if len(parts) != 2 or parts[0] == V2_NO_LIMIT:
        return None
    try:
        quota, period = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    return cpu_limit_from_quota(quota, period)


def cpu_limit_from_quota(quota: int | None, period: int | None) -> float | None:
    """Cores allowed by a CFS quota; quota <= 0 (v1 uses -1) means unconfined."""
    if quota is None or period is None or quota <= 0 or period <= 0:
        return None
    return quota / period


class ContainerDetector:
    """One-shot cgroup probe with a cached result.

    Args:
        supports_cgroups: False on non-Linux platforms; detection then
            reports unconfined immediately.
        cgroup_root: Root of the cgroup filesystem.
        docker_marker: File whose existence marks a Docker container.
        kubernetes_marker: Directory whose existence marks a Kubernetes pod.
        host_total_memory: Callable returning total host memory in bytes.
    """

    def __init__(
        self,
        supports_cgroups: bool = True,
        cgroup_root: Path = CGROUP_ROOT,
        docker_marker: Path = DOCKER_MARKER,
        kubernetes_marker: Path = KUBERNETES_MARKER,
        host_total_memory: Callable[[], int] | None = None,
    ) -> None:
        self.supports_cgroups = supports_cgroups
        self.cgroup_root = Path(cgroup_root)
        self.docker_marker = Path(docker_marker)
        self.kubernetes_marker = Path(kubernetes_marker)
        self._host_total_memory = host_total_memory or (lambda: psutil.virtual_memory().total)
        self._info: ContainerInfo | None = None

    @property
    def detected(self) -> bool:
        return self._info is not None

    def detect(self) -> ContainerInfo:
        """Return the container environment, probing on the first call only."""
        if self._info is None:
            self._info = self._probe()
            log.info(
                CONTAINER_DETECTED,
                is_containerized=self._info.is_containerized,
                cgroup_version=self._info.cgroup_version.value,
                memory_limit_bytes=self._info.memory_limit_bytes,
                cpu_limit_cores=self._info.cpu_limit_cores,
            )
        return self._info

    def reset(self) -> None:
        """Forget the cached result so the next detect() probes again."""
        self._info = None

    def read_memory_usage(self, info: ContainerInfo) -> int | None:
        """Current memory usage of the cgroup the limit was read from."""
        if info.cgroup_version is CgroupVersion.V2:
            return _read_int(self.cgroup_root / V2_MEMORY_CURRENT)
        if info.cgroup_version is CgroupVersion.V1:
            return _read_int(self.cgroup_root / V1_MEMORY_USAGE)
        return None

    def _probe(self) -> ContainerInfo:
        if not self.supports_cgroups:
            return ContainerInfo.unconfined()

        try:
            info = self._probe_cgroups()
            if not info.is_containerized and (
                _exists(self.docker_marker) or _exists(self.kubernetes_marker)
            ):
                info = ContainerInfo(is_containerized=True)
            return info
        except (OSError, ValueError, RuntimeError) as e:
            log.debug("container_detection_failed", error=str(e), error_type=type(e).__name__)
            return ContainerInfo.unconfined()

    def _probe_cgroups(self) -> ContainerInfo:
        root = self.cgroup_root

        if _exists(root / V2_MEMORY_MAX):
            memory_limit = self._parse_v2_memory(_read_text(root / V2_MEMORY_MAX))
            cpu_limit = parse_cpu_max(_read_text(root / V2_CPU_MAX))
            version = CgroupVersion.V2
        elif _exists(root / V1_MEMORY_LIMIT):
            memory_limit = self._parse_v1_memory(_read_int(root / V1_MEMORY_LIMIT))
            cpu_limit = cpu_limit_from_quota(
                _read_int(root / V1_CPU_QUOTA), _read_int(root / V1_CPU_PERIOD)
            )
            version = CgroupVersion.V1
        else:
            return ContainerInfo.unconfined()

        if memory_limit is None and cpu_limit is None:
            return ContainerInfo.unconfined()

        return ContainerInfo(
            is_containerized=True,
            cgroup_version=version,
            memory_limit_bytes=memory_limit,
            cpu_limit_cores=cpu_limit,
        )

    def _parse_v2_memory(self, raw: str | None) -> int | None:
        if raw is None or raw == V2_NO_LIMIT:
            return None
        try:
            limit = int(raw)
        except ValueError:
            return None
        return limit if 0 < limit < self._host_total_memory() else None

    def _parse_v1_memory(self, limit: int | None) -> int | None:
        if limit is None or limit <= 0 or limit >= V1_NO_LIMIT_THRESHOLD:
            return None
        return limit if limit < self._host_total_memory() else None
