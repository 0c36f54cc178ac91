"""Event loop lag probe.

Every `interval_seconds` the probe schedules a zero-delay callback with
loop.call_soon and records how long it took to run. On an idle loop this is
a few microseconds; when request handlers hog the loop the callback queues
behind them and the gauge rises.
"""

import asyncio
import contextlib
import time
from collections.abc import Callable

from perf_monitor.telemetry import LAG_PROBE_STARTED, LAG_PROBE_STOPPED, get_logger

log = get_logger(__name__)


class EventLoopLagProbe:
    """Periodic task owning the event loop lag gauge.

    Usage:
        >>> probe = EventLoopLagProbe(interval_seconds=1.0)
        >>> await probe.start()
        >>> lag = probe.lag_ms  # milliseconds
        >>> await probe.stop()
    """

    def __init__(
        self,
        interval_seconds: float = 1.0,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._lag_ms = 0.0
        self._task: asyncio.Task[None] | None = None

    @property
    def lag_ms(self) -> float:
        """Most recent lag measurement in milliseconds."""
        return self._lag_ms

    @lag_ms.setter
    def lag_ms(self, value: float) -> None:
        self._lag_ms = value

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def measure(self) -> None:
        """Schedule one measurement on the running loop."""
        loop = asyncio.get_running_loop()
        loop.call_soon(self._record, self._clock())

    def _record(self, scheduled_at: float) -> None:
        self._lag_ms = (self._clock() - scheduled_at) * 1000.0

    async def start(self) -> None:
        """Start the periodic task. A running probe is left untouched."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="event-loop-lag-probe")
        log.info(LAG_PROBE_STARTED, interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the periodic task and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        log.info(LAG_PROBE_STOPPED, last_lag_ms=round(self._lag_ms, 2))

    async def _run(self) -> None:
        while True:
            self.measure()
            await asyncio.sleep(self.interval_seconds)
