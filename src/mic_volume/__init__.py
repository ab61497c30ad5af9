"""mic-volume - live microphone loudness with a sliding-window average."""

__version__ = "0.1.0"

from .config import (
    MicVolumeConfig,
    MeasurementConfig,
    AudioConfig,
)
from .exceptions import (
    MicVolumeError,
    ConfigurationError,
    InvalidInputError,
    SourceUnavailableError,
    AudioDeviceError,
    MeasurementError,
)
from .meter import (
    LoopState,
    MeasurementLoop,
    VolumeReport,
    measure_microphone_volume,
)

__all__ = [
    # Measurement
    "MeasurementLoop",
    "LoopState",
    "VolumeReport",
    "measure_microphone_volume",
    # Configuration
    "MicVolumeConfig",
    "MeasurementConfig",
    "AudioConfig",
    # Exceptions
    "MicVolumeError",
    "ConfigurationError",
    "InvalidInputError",
    "SourceUnavailableError",
    "AudioDeviceError",
    "MeasurementError",
]
