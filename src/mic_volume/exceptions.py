"""Custom exceptions for mic-volume."""


class MicVolumeError(Exception):
    """Base exception for all mic-volume errors."""
    pass


class ConfigurationError(MicVolumeError):
    """Raised when configuration or measurement options are invalid."""
    pass


class InvalidInputError(MicVolumeError):
    """Raised when a sample buffer is empty or malformed."""
    pass


class SourceUnavailableError(MicVolumeError):
    """Raised when the sample source cannot supply a buffer."""
    pass


class AudioDeviceError(SourceUnavailableError):
    """Raised when an input device cannot be found or opened."""
    pass


class MeasurementError(MicVolumeError):
    """Raised when a measurement loop is used in an invalid state."""
    pass
