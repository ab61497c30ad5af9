"""Frame tick scheduling."""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..exceptions import ConfigurationError, MeasurementError

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameScheduler(ABC):
    """
    Delivers one-shot frame callbacks.

    Implementations must invoke callbacks serially: a callback registered
    while another is running fires on a later frame, never re-entrantly.
    """

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> None:
        """Register ``callback(timestamp_ms)`` for the next frame."""


class FrameClock(FrameScheduler):
    """
    Blocking frame loop paced by a monotonic clock.

    Timestamps passed to callbacks are milliseconds since the clock first
    ran. ``run`` keeps going while callbacks are pending; a callback that
    does not re-register ends the loop. Callbacks still pending when a run
    is stopped or reaches its duration are dropped.
    """

    def __init__(
        self,
        fps: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], object]] = None,
    ):
        """
        Initialize the clock.

        Args:
            fps: Target frames per second
            clock: Monotonic time source in seconds
            sleep: Sleep function; defaults to a wait that stop() interrupts
        """
        if not (fps > 0):
            raise ConfigurationError(f"Invalid frame rate {fps}. Must be greater than 0")

        self.interval = 1.0 / fps
        self._clock = clock
        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait
        self._pending: List[FrameCallback] = []
        self._origin: Optional[float] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    def stop(self) -> None:
        """
        Stop the loop after the current frame; pending callbacks are dropped.

        A stop requested before ``run`` starts ends that run immediately.
        """
        self._stop_event.set()

    def run(self, duration: Optional[float] = None) -> int:
        """
        Deliver frames until nothing is pending, ``stop`` is called or
        ``duration`` seconds pass.

        Exceptions raised by callbacks propagate to the caller.

        Returns:
            Number of frames delivered
        """
        if self._running:
            raise MeasurementError("Frame clock is already running")

        self._running = True
        frames = 0
        expired = False

        start = self._clock()
        if self._origin is None:
            self._origin = start
        deadline = None if duration is None else start + duration
        next_frame = start

        try:
            while self._pending and not self._stop_event.is_set():
                now = self._clock()
                if deadline is not None and now >= deadline:
                    logger.debug(f"Frame clock reached its {duration}s limit")
                    expired = True
                    break

                if now < next_frame:
                    wait = next_frame - now
                    if deadline is not None:
                        wait = min(wait, deadline - now)
                    self._sleep(wait)
                    continue

                callbacks, self._pending = self._pending, []
                timestamp = (now - self._origin) * 1000.0
                for callback in callbacks:
                    callback(timestamp)
                frames += 1

                next_frame += self.interval
                if next_frame <= now:
                    # Fell behind; skip missed frames instead of bursting
                    next_frame = now + self.interval
        finally:
            self._running = False
            if expired or self._stop_event.is_set():
                self._pending.clear()
            self._stop_event.clear()

        logger.debug(f"Frame clock delivered {frames} frame(s)")
        return frames
