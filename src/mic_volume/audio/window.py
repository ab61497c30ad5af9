"""Time-bounded sliding window of loudness samples."""

import logging
import math
from collections import deque
from typing import Deque, Optional, Tuple

import numpy as np

from ..exceptions import ConfigurationError
from .loudness import LoudnessSample

logger = logging.getLogger(__name__)


class SlidingWindowAverager:
    """
    Running average of the loudness samples younger than ``avg_duration``.

    A sample survives a push only while ``now - sample.timestamp < avg_duration``,
    so the window is the half-open interval ``(now - avg_duration, now]``.
    Samples arrive in tick order, which keeps the deque sorted by timestamp
    and lets eviction stop at the first sample young enough to stay.
    """

    def __init__(self, avg_duration: float = 2000.0):
        """
        Initialize the averager.

        Args:
            avg_duration: Window length in milliseconds (finite, > 0)
        """
        if not (avg_duration > 0) or math.isinf(avg_duration):
            raise ConfigurationError(
                f"Invalid avg_duration {avg_duration}. "
                "Must be a finite number of milliseconds greater than 0"
            )
        self.avg_duration = float(avg_duration)
        self._samples: Deque[LoudnessSample] = deque()
        self._last_now: Optional[float] = None

    def push(self, sample: LoudnessSample, now: float) -> float:
        """
        Evict expired samples, append ``sample`` and return the window mean.

        Args:
            sample: New loudness sample
            now: Current tick time in milliseconds

        Returns:
            Mean volume over the window, including ``sample``
        """
        if self._last_now is not None and now < self._last_now:
            # Strict comparison still applies; older samples may linger
            logger.debug(
                f"Timestamp regression: {now:.3f}ms after {self._last_now:.3f}ms"
            )
        self._last_now = now

        samples = self._samples
        while samples and now - samples[0].timestamp >= self.avg_duration:
            samples.popleft()

        samples.append(sample)

        volumes = np.fromiter(
            (s.volume for s in samples), dtype=np.float64, count=len(samples)
        )
        return float(np.mean(volumes))

    @property
    def samples(self) -> Tuple[LoudnessSample, ...]:
        """Snapshot of the window, oldest first."""
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def reset(self) -> None:
        """Discard all samples."""
        self._samples.clear()
        self._last_now = None
