"""Tests for configuration management."""

import json

import pytest

from mic_volume.config import AudioConfig, MeasurementConfig, MicVolumeConfig
from mic_volume.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def home(isolated_home):
    return isolated_home


def write_config(home, data):
    path = home / ".config" / "mic_volume" / "config.json"
    path.parent.mkdir(parents=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return path


def test_default_config():
    """Test default configuration values."""
    config = MicVolumeConfig.load()
    assert config.measurement.avg_duration == 2000.0
    assert config.measurement.amplify == 10.0
    assert config.audio.sample_rate == 44100
    assert config.audio.channels == 1
    assert config.audio.device_id is None
    assert config.audio.buffer_size == 2048
    assert config.audio.frame_rate == 60.0


def test_env_override(monkeypatch):
    """Test environment variable overrides."""
    monkeypatch.setenv("MIC_VOLUME_AVG_DURATION", "500")
    monkeypatch.setenv("MIC_VOLUME_AMPLIFY", "2.5")
    monkeypatch.setenv("MIC_VOLUME_SAMPLE_RATE", "48000")
    monkeypatch.setenv("MIC_VOLUME_DEVICE_ID", "3")
    monkeypatch.setenv("MIC_VOLUME_BUFFER_SIZE", "1024")
    monkeypatch.setenv("MIC_VOLUME_FRAME_RATE", "30")

    config = MicVolumeConfig.load()
    assert config.measurement.avg_duration == 500.0
    assert config.measurement.amplify == 2.5
    assert config.audio.sample_rate == 48000
    assert config.audio.device_id == 3
    assert config.audio.buffer_size == 1024
    assert config.audio.frame_rate == 30.0


def test_invalid_env_value_uses_default(monkeypatch, caplog):
    monkeypatch.setenv("MIC_VOLUME_AMPLIFY", "loud")
    config = MicVolumeConfig.load()
    assert config.measurement.amplify == 10.0
    assert "MIC_VOLUME_AMPLIFY" in caplog.text


def test_env_value_validated(monkeypatch):
    monkeypatch.setenv("MIC_VOLUME_AVG_DURATION", "-5")
    with pytest.raises(ConfigurationError, match="avg_duration"):
        MicVolumeConfig.load()


def test_file_config_merged(home):
    write_config(home, {"measurement": {"amplify": 4}, "audio": {"channels": 2}})
    config = MicVolumeConfig.load()
    assert config.measurement.amplify == 4
    assert config.measurement.avg_duration == 2000.0
    assert config.audio.channels == 2


def test_env_beats_file(home, monkeypatch):
    write_config(home, {"measurement": {"amplify": 4}})
    monkeypatch.setenv("MIC_VOLUME_AMPLIFY", "7")
    assert MicVolumeConfig.load().measurement.amplify == 7.0


def test_unknown_file_keys_ignored(home, caplog):
    write_config(home, {"measurement": {"smoothing": 0.5}, "ui": {}})
    config = MicVolumeConfig.load()
    assert config.measurement == MeasurementConfig()
    assert "measurement.smoothing" in caplog.text


def test_corrupt_file_uses_defaults(home, caplog):
    write_config(home, "{not json")
    config = MicVolumeConfig.load()
    assert config.measurement == MeasurementConfig()
    assert "invalid JSON" in caplog.text


@pytest.mark.parametrize("content", ["[]", "42", "\"audio\"", "null"])
def test_non_object_file_uses_defaults(home, caplog, content):
    """A config file that parses but is not an object is treated as corrupt."""
    write_config(home, content)
    config = MicVolumeConfig.load()
    assert config.measurement == MeasurementConfig()
    assert config.audio == AudioConfig()
    assert "corrupted" in caplog.text


@pytest.mark.parametrize(
    "audio, message",
    [
        ({"sample_rate": "44100"}, "sample rate"),
        ({"buffer_size": 2048.0}, "buffer size"),
        ({"channels": True}, "channels"),
        ({"device_id": "2"}, "device id"),
        ({"frame_rate": "60"}, "frame rate"),
    ],
)
def test_mistyped_file_values_rejected(home, audio, message):
    write_config(home, {"audio": audio})
    with pytest.raises(ConfigurationError, match=message):
        MicVolumeConfig.load()


def test_mistyped_file_measurement_value_rejected(home):
    write_config(home, {"measurement": {"amplify": "loud"}})
    with pytest.raises(ConfigurationError, match="amplify"):
        MicVolumeConfig.load()


@pytest.mark.parametrize(
    "options",
    [
        {"avg_duration": 0},
        {"avg_duration": -100},
        {"avg_duration": float("nan")},
        {"avg_duration": float("inf")},
        {"amplify": -0.1},
        {"amplify": float("nan")},
        {"amplify": "10"},
        {"avg_duration": True},
        {"volume": 1},
    ],
)
def test_invalid_measurement_options(options):
    with pytest.raises(ConfigurationError):
        MeasurementConfig.from_options(options)


def test_measurement_options_defaults():
    assert MeasurementConfig.from_options(None) == MeasurementConfig(2000.0, 10.0)
    assert MeasurementConfig.from_options({}) == MeasurementConfig(2000.0, 10.0)
    assert MeasurementConfig.from_options({"amplify": 0}) == MeasurementConfig(2000.0, 0.0)


def test_measurement_options_passthrough():
    config = MeasurementConfig(avg_duration=250, amplify=1)
    assert MeasurementConfig.from_options(config) is config


def test_measurement_config_is_immutable():
    config = MeasurementConfig()
    with pytest.raises(AttributeError):
        config.amplify = 3.0


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"sample_rate": 4000}, "sample rate"),
        ({"channels": 3}, "channels"),
        ({"buffer_size": 1000}, "buffer size"),
        ({"buffer_size": 16}, "buffer size"),
        ({"frame_rate": 0}, "frame rate"),
        ({"frame_rate": 500}, "frame rate"),
        ({"sample_rate": 44100.0}, "sample rate"),
        ({"buffer_size": None}, "buffer size"),
        ({"device_id": 1.5}, "device id"),
        ({"frame_rate": float("nan")}, "frame rate"),
    ],
)
def test_invalid_audio_config(kwargs, message):
    with pytest.raises(ConfigurationError, match=message):
        AudioConfig(**kwargs).validate()


def test_audio_config_accepts_device_id():
    AudioConfig(device_id=3, frame_rate=30).validate()
