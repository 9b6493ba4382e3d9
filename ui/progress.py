"""Progress tracking"""

import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from core.models import ProgressEvent, ProgressPolicy


class ProgressTracker(ABC):
    """Abstract progress sink"""

    @abstractmethod
    def update(self, event: ProgressEvent):
        """Receive a progress event; may be a coroutine"""
        pass


async def emit(tracker: Optional[ProgressTracker], event: ProgressEvent) -> None:
    """Deliver an event to a sync or async tracker"""
    if tracker is None:
        return
    result = tracker.update(event)
    # Handle both sync and async progress trackers
    if hasattr(result, '__await__'):
        await result


class NullProgress(ProgressTracker):
    """Discards all events"""

    def update(self, event: ProgressEvent):
        pass


class CallbackProgress(ProgressTracker):
    """Forwards events to a callable"""

    def __init__(self, callback: Callable[[ProgressEvent], object]):
        self.callback = callback

    def update(self, event: ProgressEvent):
        return self.callback(event)


class ConsoleProgress(ProgressTracker):
    """Console-based progress tracker"""

    def __init__(self, stream=None):
        self.stream = stream
        self.current = None

    def update(self, event: ProgressEvent):
        key = (event.index, event.phase)
        if event.item_name is None:
            print(f"[✓] {event.phase}", file=self.stream)
            self.current = None
            return
        if key != self.current:
            self.current = key
            print(f"[◉] {event.index + 1}/{event.total} {event.item_name}: {event.phase}", file=self.stream)
        if event.percent == 100:
            print(f"    {event.phase} 100%", file=self.stream)


class ProgressAggregator:
    """
    Turns raw byte counts into rate-limited percentage events for one phase.

    An event is emitted when the percentage advanced by at least one point,
    or when `interval` seconds passed since the last event and the byte
    count moved. Percentages never decrease within a phase.

    With a known `total_bytes` the percentage is bytes/total and may reach
    100. Without one (exports), each `bytes_per_percent` bytes count as one
    point, capped at `cap` until finish() reports completion.
    """

    def __init__(
        self,
        tracker: Optional[ProgressTracker],
        phase: str,
        *,
        index: int = 0,
        total: int = 1,
        item_name: Optional[str] = None,
        total_bytes: Optional[int] = None,
        cap: int = 95,
        bytes_per_percent: int = 1024 * 1024,
        interval: float = 0.2,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.tracker = tracker
        self.phase = phase
        self.index = index
        self.total = total
        self.item_name = item_name
        self.total_bytes = total_bytes
        self.cap = cap
        self.bytes_per_percent = max(1, bytes_per_percent)
        self.interval = interval
        self.clock = clock
        self.last_percent = 0
        self.last_count = 0
        self.count = 0
        self.last_time = clock()
        self.emitted = 0

    @classmethod
    def with_policy(
        cls,
        policy: Optional[ProgressPolicy],
        tracker: Optional[ProgressTracker],
        phase: str,
        **kwargs
    ) -> "ProgressAggregator":
        """Build an aggregator tuned by a ProgressPolicy"""
        policy = policy or ProgressPolicy()
        return cls(
            tracker,
            phase,
            cap=policy.cap,
            bytes_per_percent=policy.bytes_per_percent,
            interval=policy.interval,
            **kwargs
        )

    def percent_for(self, count: int) -> int:
        if self.total_bytes is not None:
            if self.total_bytes <= 0:
                return 0
            return max(0, min(100, round(count * 100 / self.total_bytes)))
        return max(0, min(self.cap, count // self.bytes_per_percent))

    async def _emit(self, percent: int, count: Optional[int]) -> None:
        self.last_percent = percent
        self.last_time = self.clock()
        self.emitted += 1
        await emit(self.tracker, ProgressEvent(
            index=self.index,
            total=self.total,
            item_name=self.item_name,
            phase=self.phase,
            percent=percent,
            bytes_processed=count,
        ))

    async def start(self) -> None:
        """Emit the 0% event that opens the phase"""
        await self._emit(0, 0)

    async def update(self, count: int) -> None:
        """Byte callback: emit if the rate limit allows"""
        self.count = count
        percent = max(self.percent_for(count), self.last_percent)
        now = self.clock()
        advanced = percent - self.last_percent >= 1
        stale = now - self.last_time >= self.interval and count != self.last_count
        if advanced or stale:
            self.last_count = count
            await self._emit(percent, count)

    async def finish(self) -> None:
        """Emit the 100% event that closes the phase"""
        await self._emit(100, self.count)
