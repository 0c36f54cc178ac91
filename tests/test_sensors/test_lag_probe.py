"""Tests for the event loop lag probe."""

import asyncio
import time

import pytest

from perf_monitor.sensors.lag import EventLoopLagProbe


class TestEventLoopLagProbe:
    @pytest.mark.asyncio
    async def test_measure_records_callback_delay(self) -> None:
        readings = iter([10.0, 10.025])
        probe = EventLoopLagProbe(clock=lambda: next(readings))

        probe.measure()
        await asyncio.sleep(0)

        assert probe.lag_ms == pytest.approx(25.0)

    @pytest.mark.asyncio
    async def test_blocked_loop_raises_gauge(self) -> None:
        probe = EventLoopLagProbe()

        probe.measure()
        time.sleep(0.05)
        await asyncio.sleep(0)

        assert probe.lag_ms >= 40.0

    @pytest.mark.asyncio
    async def test_start_and_stop(self) -> None:
        probe = EventLoopLagProbe(interval_seconds=0.01)
        assert probe.running is False

        await probe.start()
        assert probe.running is True
        await asyncio.sleep(0.05)
        await probe.stop()

        assert probe.running is False
        assert probe.lag_ms >= 0.0

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self) -> None:
        probe = EventLoopLagProbe(interval_seconds=0.01)
        await probe.start()
        task = probe._task

        await probe.start()

        assert probe._task is task
        await probe.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self) -> None:
        probe = EventLoopLagProbe()
        await probe.stop()
        assert probe.running is False

    def test_initial_gauge_is_zero(self) -> None:
        assert EventLoopLagProbe().lag_ms == 0.0
