"""Microphone sample source backed by sounddevice."""

import logging
import threading
from typing import Optional

import numpy as np
import sounddevice as sd

from ..config import AudioConfig
from ..exceptions import AudioDeviceError, SourceUnavailableError
from .devices import InputDevice, resolve_input_device
from .source import SampleSource

logger = logging.getLogger(__name__)


class SoundDeviceSource(SampleSource):
    """
    Microphone source backed by a PortAudio input stream.

    The stream callback runs on the audio thread and keeps a ring of the
    last ``buffer_size`` samples of the first channel. ``get_buffer`` copies
    that ring, so callers always see the newest audio regardless of how
    blocks line up with frame ticks.
    """

    def __init__(self, config: Optional[AudioConfig] = None):
        self.config = config or AudioConfig()
        self.config.validate()

        self._ring = np.zeros(self.config.buffer_size, dtype=np.float32)
        self._ring_lock = threading.Lock()
        self._stream: Optional[sd.InputStream] = None
        self._device: Optional[InputDevice] = None
        self._finished = threading.Event()

    @property
    def device(self) -> Optional[InputDevice]:
        """Device the stream was opened on, if any."""
        return self._device

    @property
    def is_open(self) -> bool:
        return self._stream is not None and not self._finished.is_set()

    def _audio_callback(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        """Copy a block into the ring (runs in audio thread)."""
        if status:
            logger.warning(f"Audio callback status: {status}")
        if frames == 0:
            return

        block = indata[:, 0] if indata.ndim > 1 else indata
        size = self._ring.size

        with self._ring_lock:
            if frames >= size:
                self._ring[:] = block[-size:]
            else:
                self._ring[:-frames] = self._ring[frames:]
                self._ring[-frames:] = block

    def _stream_finished(self) -> None:
        self._finished.set()
        logger.info("Input stream finished")

    def open(self) -> "SoundDeviceSource":
        """
        Acquire the microphone and start capturing.

        Raises:
            AudioDeviceError: If no usable device exists or the stream fails
        """
        if self._stream is not None:
            logger.warning("Source already open, ignoring open request")
            return self

        self._device = resolve_input_device(
            self.config.device_id,
            self.config.sample_rate,
            self.config.channels,
        )

        self._finished.clear()
        with self._ring_lock:
            self._ring.fill(0.0)

        try:
            stream = sd.InputStream(
                device=self._device.id,
                samplerate=self.config.sample_rate,
                channels=self.config.channels,
                dtype='float32',
                callback=self._audio_callback,
                finished_callback=self._stream_finished,
            )
        except sd.PortAudioError as e:
            raise AudioDeviceError(
                f"Failed to open input stream on '{self._device.name}': {e}"
            ) from e

        try:
            stream.start()
        except sd.PortAudioError as e:
            stream.close()
            raise AudioDeviceError(
                f"Failed to start input stream on '{self._device.name}': {e}"
            ) from e

        self._stream = stream
        logger.info(
            f"Input stream opened: {self.config.sample_rate}Hz, "
            f"{self.config.buffer_size} samples/buffer"
        )
        return self

    def get_buffer(self) -> np.ndarray:
        stream = self._stream
        if stream is None:
            raise SourceUnavailableError("Input stream is not open")
        if self._finished.is_set() or not stream.active:
            raise SourceUnavailableError(
                "Input stream is no longer active (device removed or access revoked)"
            )

        with self._ring_lock:
            return self._ring.copy()

    def close(self) -> None:
        """Stop capturing and release the device."""
        stream, self._stream = self._stream, None
        if stream is None:
            return

        try:
            stream.stop()
        except sd.PortAudioError as e:
            # Stopping a stream whose device vanished fails; closing still frees it
            logger.warning(f"Failed to stop input stream: {e}")
        finally:
            stream.close()
        logger.info("Input stream closed")

    def __enter__(self) -> "SoundDeviceSource":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
