"""Shared pytest fixtures for mic-volume tests."""

import importlib
import sys
from types import SimpleNamespace
from typing import Callable, List, Sequence, Union
from unittest.mock import Mock, patch

import numpy as np
import pytest

from mic_volume.audio.scheduler import FrameScheduler
from mic_volume.audio.source import SampleSource


class ManualScheduler(FrameScheduler):
    """Scheduler whose frames are fired by the test."""

    def __init__(self):
        self.pending: List[Callable[[float], None]] = []
        self.requests = 0

    def request_frame(self, callback):
        self.requests += 1
        self.pending.append(callback)

    def tick(self, timestamp: float) -> None:
        """Fire every pending callback with ``timestamp``."""
        callbacks, self.pending = self.pending, []
        for callback in callbacks:
            callback(timestamp)


class ScriptedSource(SampleSource):
    """Returns prepared buffers in order; exceptions in the script are raised."""

    def __init__(self, script: Sequence[Union[np.ndarray, Exception]]):
        self.script = list(script)
        self.calls = 0

    def get_buffer(self):
        item = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


def constant_buffer(amplitude: float, size: int = 2048) -> np.ndarray:
    """Buffer whose RMS equals ``abs(amplitude)``."""
    return np.full(size, amplitude, dtype=np.float32)


@pytest.fixture
def scheduler():
    """Manually driven frame scheduler."""
    return ManualScheduler()


@pytest.fixture
def isolated_home(monkeypatch, tmp_path):
    """Isolate tests from real config by using a temp HOME."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for var in (
        "MIC_VOLUME_AVG_DURATION",
        "MIC_VOLUME_AMPLIFY",
        "MIC_VOLUME_SAMPLE_RATE",
        "MIC_VOLUME_CHANNELS",
        "MIC_VOLUME_DEVICE_ID",
        "MIC_VOLUME_BUFFER_SIZE",
        "MIC_VOLUME_FRAME_RATE",
    ):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


def build_fake_sounddevice():
    """Create a fake sounddevice module-like object for deterministic tests."""
    portaudio_error = type("FakePortAudioError", (Exception,), {})
    return SimpleNamespace(
        query_devices=Mock(return_value=[]),
        query_hostapis=Mock(return_value={"name": "ALSA"}),
        default=SimpleNamespace(device=[0, 1]),
        check_input_settings=Mock(),
        InputStream=Mock(),
        PortAudioError=portaudio_error,
    )


@pytest.fixture
def fake_sd():
    """Fake sounddevice module."""
    return build_fake_sounddevice()


@pytest.fixture
def import_with_fake_sd(fake_sd):
    """Import an audio module with the fake sounddevice injected."""
    def _import(name: str):
        with patch.dict(sys.modules, {"sounddevice": fake_sd}):
            sys.modules.pop("mic_volume.audio.devices", None)
            sys.modules.pop(name, None)
            module = importlib.import_module(name)
        return module

    yield _import

    sys.modules.pop("mic_volume.audio.devices", None)
    sys.modules.pop("mic_volume.audio.microphone", None)
