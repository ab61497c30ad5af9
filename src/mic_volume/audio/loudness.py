"""Loudness estimation from raw sample buffers."""

from dataclasses import dataclass

import numpy as np

from ..exceptions import ConfigurationError, InvalidInputError


@dataclass(frozen=True)
class LoudnessSample:
    """One loudness measurement."""
    volume: float      # Amplified RMS, >= 0
    timestamp: float   # Tick time in milliseconds


def calculate_volume(buffer: np.ndarray, amplify: float) -> float:
    """
    Calculate the amplified RMS of a sample buffer.

    Args:
        buffer: 1-D audio samples, roughly in [-1.0, 1.0]
        amplify: Scale factor applied to the RMS

    Returns:
        Non-negative volume

    Raises:
        InvalidInputError: If the buffer is empty, not 1-D or not numeric
    """
    try:
        samples = np.asarray(buffer, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Sample buffer is not numeric: {e}") from e

    if samples.ndim != 1:
        raise InvalidInputError(
            f"Sample buffer must be one-dimensional, got shape {samples.shape}"
        )
    if samples.size == 0:
        raise InvalidInputError("Sample buffer is empty")

    rms = float(np.sqrt(np.mean(np.square(samples))))
    return rms * amplify


class LoudnessEstimator:
    """Turns sample buffers into amplified RMS volumes."""

    def __init__(self, amplify: float = 10.0):
        if not (amplify >= 0):
            raise ConfigurationError(f"Invalid amplify {amplify}. Must be >= 0")
        self.amplify = float(amplify)

    def estimate(self, buffer: np.ndarray) -> float:
        """Return the volume of one buffer."""
        return calculate_volume(buffer, self.amplify)
