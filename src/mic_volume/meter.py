"""Per-frame microphone volume measurement."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from .audio.loudness import LoudnessEstimator, LoudnessSample
from .audio.scheduler import FrameClock, FrameScheduler
from .audio.source import SampleSource
from .audio.window import SlidingWindowAverager
from .config import AudioConfig, MeasurementConfig
from .exceptions import MeasurementError, SourceUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VolumeReport:
    """Volume delivered to the observer on each frame."""
    value: float   # Current frame's volume
    avg: float     # Mean volume over the sliding window


VolumeObserver = Callable[[VolumeReport], None]


class LoopState(Enum):
    """Measurement loop state machine."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"


class MeasurementLoop:
    """
    Measures one sample source on every scheduler frame.

    Each frame pulls a buffer from the source, estimates its volume, pushes
    it into the sliding window and hands ``VolumeReport(value, avg)`` to the
    observer before asking the scheduler for the next frame. Any error
    raised during a frame ends the session: nothing more is reported, the
    loop does not reschedule and the exception propagates through the
    scheduler to whoever is driving it.
    """

    def __init__(
        self,
        source: SampleSource,
        scheduler: FrameScheduler,
        config: Optional[MeasurementConfig] = None,
        observer: Optional[VolumeObserver] = None,
    ):
        """
        Initialize the loop.

        Args:
            source: Sample source to read on every frame
            scheduler: Frame scheduler driving the loop
            config: Measurement options (defaults if None)
            observer: Callback receiving one VolumeReport per frame

        Raises:
            ConfigurationError: If the options are invalid
        """
        if observer is None:
            raise MeasurementError("An observer callback is required")

        self.config = MeasurementConfig.from_options(config)
        self.source = source
        self.scheduler = scheduler
        self.observer = observer

        self._estimator = LoudnessEstimator(self.config.amplify)
        self._window = SlidingWindowAverager(self.config.avg_duration)
        self._state = LoopState.IDLE
        self._tick_count = 0
        self.error: Optional[Exception] = None

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == LoopState.RUNNING

    @property
    def tick_count(self) -> int:
        """Number of reports delivered so far."""
        return self._tick_count

    @property
    def window(self) -> SlidingWindowAverager:
        return self._window

    def _set_state(self, new_state: LoopState) -> None:
        logger.debug(f"State: {self._state.value} -> {new_state.value}")
        self._state = new_state

    def start(self) -> None:
        """
        Register the first frame with the scheduler.

        Raises:
            MeasurementError: If the loop already ended
        """
        if self._state == LoopState.RUNNING:
            logger.warning("Measurement already running, ignoring start request")
            return
        if self._state != LoopState.IDLE:
            raise MeasurementError(
                f"Cannot start measurement in state: {self._state.value}"
            )

        self._set_state(LoopState.RUNNING)
        self.scheduler.request_frame(self._on_frame)
        logger.info(
            f"Measurement started (avg_duration={self.config.avg_duration}ms, "
            f"amplify={self.config.amplify})"
        )

    def stop(self) -> None:
        """Stop after the current frame; the pending frame reports nothing."""
        if self._state != LoopState.RUNNING:
            return
        self._set_state(LoopState.STOPPED)
        logger.info(f"Measurement stopped after {self._tick_count} frame(s)")

    def _on_frame(self, timestamp: float) -> None:
        if self._state != LoopState.RUNNING:
            return

        try:
            buffer = self.source.get_buffer()
            volume = self._estimator.estimate(buffer)
            avg = self._window.push(LoudnessSample(volume, timestamp), timestamp)
            self.observer(VolumeReport(value=volume, avg=avg))
        except SourceUnavailableError as e:
            self._fail(e)
            logger.error(f"Sample source unavailable, measurement ended: {e}")
            raise
        except Exception as e:
            self._fail(e)
            raise

        self._tick_count += 1
        if self._state == LoopState.RUNNING:
            self.scheduler.request_frame(self._on_frame)

    def _fail(self, error: Exception) -> None:
        self.error = error
        self._set_state(LoopState.ERROR)


def measure_microphone_volume(
    observer: VolumeObserver,
    options: Union[None, MeasurementConfig, Mapping[str, Any]] = None,
    *,
    audio_config: Optional[AudioConfig] = None,
    duration: Optional[float] = None,
    clock: Optional[FrameClock] = None,
) -> MeasurementLoop:
    """
    Measure the microphone and report its volume on every frame.

    Blocks until ``duration`` seconds pass (forever if None), ``clock.stop()``
    is called or an error ends the session. The microphone is released on
    return.

    Args:
        observer: Callback receiving VolumeReport(value, avg)
        options: ``{"avg_duration": ms, "amplify": factor}``, defaults 2000 and 10
        audio_config: Capture settings (defaults if None)
        duration: Optional run time in seconds
        clock: Frame clock to drive the loop (one at ``audio_config.frame_rate``
            if None)

    Returns:
        The finished MeasurementLoop

    Raises:
        ConfigurationError: If options are invalid (before the device is opened)
        SourceUnavailableError: If the microphone cannot be opened or goes away
    """
    from .audio.microphone import SoundDeviceSource

    config = MeasurementConfig.from_options(options)
    audio_config = audio_config or AudioConfig()
    audio_config.validate()

    clock = clock or FrameClock(fps=audio_config.frame_rate)
    with SoundDeviceSource(audio_config) as source:
        loop = MeasurementLoop(source, clock, config, observer)
        loop.start()
        try:
            clock.run(duration=duration)
        finally:
            loop.stop()
    return loop
