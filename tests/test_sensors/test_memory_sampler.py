"""Tests for system, container and process memory sampling."""

from collections import namedtuple
from pathlib import Path
from unittest.mock import MagicMock, patch

import psutil
import pytest

from perf_monitor.sensors.container import ContainerDetector, ContainerInfo
from perf_monitor.sensors.memory import (
    MemoryUsage,
    read_container_memory,
    read_process_memory,
    round_half_up,
    sample_system_memory,
    used_percent,
)
from perf_monitor.sensors.platforms import GenericProbe
from perf_monitor.sensors.results import ProbeError

GIB = 1024**3

VirtualMemory = namedtuple("VirtualMemory", "total free")
MemInfo = namedtuple("MemInfo", "rss vms shared data")


class StaticProbe(GenericProbe):
    def __init__(self, available: int | None) -> None:
        super().__init__(name="test")
        self._available = available

    async def available_memory(self) -> int:
        if self._available is None:
            raise ProbeError("no memory figure")
        return self._available


def _unconfined_detector(tmp_path: Path) -> ContainerDetector:
    return ContainerDetector(
        supports_cgroups=False,
        cgroup_root=tmp_path,
        docker_marker=tmp_path / "dockerenv",
        kubernetes_marker=tmp_path / "k8s",
    )


class TestUsedPercent:
    def test_half(self) -> None:
        assert used_percent(8 * GIB, 16 * GIB) == 50.0

    def test_one_decimal(self) -> None:
        assert used_percent(1, 3) == 33.3

    def test_zero_total(self) -> None:
        assert used_percent(100, 0) == 0.0

    def test_capped_at_hundred(self) -> None:
        assert used_percent(150, 100) == 100.0

    @pytest.mark.parametrize(("used", "total", "expected"), [(1, 16, 6.3), (1, 80, 1.3), (5, 8, 62.5)])
    def test_halves_round_up(self, used: int, total: int, expected: float) -> None:
        assert used_percent(used, total) == expected

    def test_memory_block_rounds_halves_up(self) -> None:
        usage = MemoryUsage.from_total_and_free(GIB, GIB - 64 * 1024**2)

        assert usage.used_percent == 6.3


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "digits", "expected"),
        [(2.5, 0, 3.0), (3.5, 0, 4.0), (0.125, 2, 0.13), (12.25, 1, 12.3), (-0.5, 0, 0.0), (7.04, 1, 7.0)],
    )
    def test_round(self, value: float, digits: int, expected: float) -> None:
        assert round_half_up(value, digits) == expected


class TestSystemMemory:
    """Test host memory sampling through the platform probe."""

    @pytest.mark.asyncio
    async def test_sixteen_total_eight_free(self, tmp_path: Path) -> None:
        vm = VirtualMemory(total=16 * GIB, free=2 * GIB)
        with patch("perf_monitor.sensors.memory.psutil.virtual_memory", return_value=vm):
            result = await sample_system_memory(
                _unconfined_detector(tmp_path), StaticProbe(8 * GIB)
            )

        assert result.is_degraded is False
        assert result.value == MemoryUsage(
            total=16 * GIB,
            used=8 * GIB,
            free=8 * GIB,
            available=8 * GIB,
            used_percent=50.0,
        )

    @pytest.mark.asyncio
    async def test_probe_failure_falls_back_to_psutil_free(self, tmp_path: Path) -> None:
        vm = VirtualMemory(total=16 * GIB, free=4 * GIB)
        with patch("perf_monitor.sensors.memory.psutil.virtual_memory", return_value=vm):
            result = await sample_system_memory(_unconfined_detector(tmp_path), StaticProbe(None))

        assert result.is_degraded is True
        assert result.reason == "no memory figure"
        assert result.value.free == 4 * GIB
        assert result.value.used_percent == 75.0

    @pytest.mark.asyncio
    async def test_container_limit_replaces_host_figures(self, tmp_path: Path) -> None:
        (tmp_path / "memory.max").write_text(f"{GIB}\n")
        (tmp_path / "memory.current").write_text(f"{GIB // 4}\n")
        detector = ContainerDetector(
            cgroup_root=tmp_path,
            docker_marker=tmp_path / "dockerenv",
            kubernetes_marker=tmp_path / "k8s",
            host_total_memory=lambda: 16 * GIB,
        )

        result = await sample_system_memory(detector, StaticProbe(None))

        assert result.is_degraded is False
        assert result.value.total == GIB
        assert result.value.used == GIB // 4
        assert result.value.available == GIB - GIB // 4
        assert result.value.used_percent == 25.0


class TestContainerMemory:
    def test_unconfined_returns_none(self, tmp_path: Path) -> None:
        detector = _unconfined_detector(tmp_path)
        assert read_container_memory(detector, ContainerInfo.unconfined()) is None

    def test_marker_only_container_returns_none(self, tmp_path: Path) -> None:
        detector = _unconfined_detector(tmp_path)
        info = ContainerInfo(is_containerized=True)
        assert read_container_memory(detector, info) is None


class TestProcessMemory:
    """Test process memory counters."""

    def test_counters(self) -> None:
        process = MagicMock(spec=psutil.Process)
        process.memory_info.return_value = MemInfo(
            rss=GIB, vms=4 * GIB, shared=100, data=GIB // 2
        )

        memory = read_process_memory(process, 16 * GIB).value

        assert memory.rss == GIB
        assert memory.heap_total == 4 * GIB
        assert memory.heap_used == GIB // 2
        assert memory.external == 100
        assert memory.percent_of_system == pytest.approx(6.25)

    def test_missing_platform_fields(self) -> None:
        process = MagicMock(spec=psutil.Process)
        process.memory_info.return_value = namedtuple("Mem", "rss vms")(rss=10, vms=20)

        memory = read_process_memory(process, 0).value

        assert memory.heap_used == 10
        assert memory.external == 0
        assert memory.percent_of_system == 0.0

    def test_psutil_error_degrades(self) -> None:
        process = MagicMock(spec=psutil.Process)
        process.memory_info.side_effect = psutil.NoSuchProcess(pid=1)

        result = read_process_memory(process, GIB)

        assert result.is_degraded is True
        assert result.value.rss == 0
