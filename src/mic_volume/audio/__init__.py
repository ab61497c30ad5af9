"""Audio sampling and aggregation for mic-volume."""

from importlib import import_module

__all__ = [
    "LoudnessEstimator",
    "LoudnessSample",
    "calculate_volume",
    "SlidingWindowAverager",
    "SampleSource",
    "SoundDeviceSource",
    "FrameScheduler",
    "FrameClock",
    "InputDevice",
    "list_input_devices",
    "resolve_input_device",
]

_LAZY_EXPORTS = {
    "LoudnessEstimator": ("loudness", "LoudnessEstimator"),
    "LoudnessSample": ("loudness", "LoudnessSample"),
    "calculate_volume": ("loudness", "calculate_volume"),
    "SlidingWindowAverager": ("window", "SlidingWindowAverager"),
    "SampleSource": ("source", "SampleSource"),
    "SoundDeviceSource": ("microphone", "SoundDeviceSource"),
    "FrameScheduler": ("scheduler", "FrameScheduler"),
    "FrameClock": ("scheduler", "FrameClock"),
    "InputDevice": ("devices", "InputDevice"),
    "list_input_devices": ("devices", "list_input_devices"),
    "resolve_input_device": ("devices", "resolve_input_device"),
}


def __getattr__(name):
    """Lazily import audio modules so sounddevice is only loaded when needed."""
    if name in _LAZY_EXPORTS:
        module_name, attr_name = _LAZY_EXPORTS[name]
        module = import_module(f".{module_name}", __name__)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
