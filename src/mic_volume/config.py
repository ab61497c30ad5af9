"""Configuration management for mic-volume."""

import json
import logging
import math
import numbers
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_AVG_DURATION_MS = 2000.0
DEFAULT_AMPLIFY = 10.0

CONFIG_DIR = Path(".config") / "mic_volume"
CONFIG_FILE_NAME = "config.json"


def parse_int_env(env_var: str, default: Optional[int]) -> Optional[int]:
    """Parse integer environment variable with validation."""
    value = os.getenv(env_var)
    if value is None:
        return default

    try:
        return int(value)
    except ValueError:
        logger.warning(
            f"Invalid integer value '{value}' for {env_var}. "
            f"Using default: {default}"
        )
        return default


def parse_float_env(env_var: str, default: float) -> float:
    """Parse float environment variable with validation."""
    value = os.getenv(env_var)
    if value is None:
        return default

    try:
        return float(value)
    except ValueError:
        logger.warning(
            f"Invalid float value '{value}' for {env_var}. "
            f"Using default: {default}"
        )
        return default


def _require_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(
            f"Invalid {name} {value!r}. Must be a number"
        )
    return float(value)


def _require_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(
            f"Invalid {name} {value!r}. Must be an integer"
        )
    return int(value)


@dataclass(frozen=True)
class MeasurementConfig:
    """Options for one measurement session.

    ``avg_duration`` is the sliding window length in milliseconds and
    ``amplify`` scales the raw RMS into a human-readable range.
    """
    avg_duration: float = DEFAULT_AVG_DURATION_MS
    amplify: float = DEFAULT_AMPLIFY

    @classmethod
    def from_options(
        cls,
        options: Union[None, "MeasurementConfig", Mapping[str, Any]] = None,
    ) -> "MeasurementConfig":
        """
        Build a validated config from an options mapping.

        Args:
            options: Mapping with optional ``avg_duration`` and ``amplify``
                keys, an existing MeasurementConfig, or None for defaults

        Returns:
            Validated MeasurementConfig

        Raises:
            ConfigurationError: If a key is unknown or a value is invalid
        """
        if options is None:
            config = cls()
        elif isinstance(options, MeasurementConfig):
            config = options
        else:
            unknown = sorted(set(options) - {"avg_duration", "amplify"})
            if unknown:
                raise ConfigurationError(
                    f"Unknown measurement option(s): {', '.join(unknown)}. "
                    "Valid options: avg_duration, amplify"
                )
            config = cls(
                avg_duration=_require_number(
                    "avg_duration", options.get("avg_duration", DEFAULT_AVG_DURATION_MS)
                ),
                amplify=_require_number(
                    "amplify", options.get("amplify", DEFAULT_AMPLIFY)
                ),
            )

        config.validate()
        return config

    def validate(self) -> None:
        """Validate measurement options."""
        avg_duration = _require_number("avg_duration", self.avg_duration)
        amplify = _require_number("amplify", self.amplify)

        # `not (x > 0)` also rejects NaN
        if not (avg_duration > 0) or math.isinf(avg_duration):
            raise ConfigurationError(
                f"Invalid avg_duration {self.avg_duration}. "
                "Must be a finite number of milliseconds greater than 0"
            )

        if not (amplify >= 0) or math.isinf(amplify):
            raise ConfigurationError(
                f"Invalid amplify {self.amplify}. "
                "Must be a finite number >= 0"
            )


@dataclass
class AudioConfig:
    """Configuration for audio capture."""
    sample_rate: int = 44100           # Hz
    channels: int = 1                  # Only the first channel is measured
    device_id: Optional[int] = None    # None = default device
    buffer_size: int = 2048            # Samples per analysis buffer
    frame_rate: float = 60.0           # Ticks per second

    def validate(self) -> None:
        """Validate audio capture settings."""
        sample_rate = _require_int("sample rate", self.sample_rate)
        if not (8000 <= sample_rate <= 192000):
            raise ConfigurationError(
                f"Invalid sample rate {self.sample_rate}. "
                "Must be between 8000 and 192000 Hz"
            )

        if _require_int("channels", self.channels) not in (1, 2):
            raise ConfigurationError(
                f"Invalid channels {self.channels}. "
                "Must be 1 (mono) or 2 (stereo)"
            )

        size = _require_int("buffer size", self.buffer_size)
        if not (32 <= size <= 32768) or size & (size - 1):
            raise ConfigurationError(
                f"Invalid buffer size {size}. "
                "Must be a power of two between 32 and 32768"
            )

        if self.device_id is not None:
            _require_int("device id", self.device_id)

        if not (0.0 < _require_number("frame rate", self.frame_rate) <= 240.0):
            raise ConfigurationError(
                f"Invalid frame rate {self.frame_rate}. "
                "Must be greater than 0 and at most 240"
            )


@dataclass
class MicVolumeConfig:
    """Main configuration for mic-volume."""
    measurement: MeasurementConfig = field(default_factory=MeasurementConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)

    @staticmethod
    def config_path() -> Path:
        """Location of the user configuration file."""
        return Path.home() / CONFIG_DIR / CONFIG_FILE_NAME

    @classmethod
    def load(cls) -> "MicVolumeConfig":
        """Load configuration from file and environment variables."""
        config_dict = {
            "measurement": {
                "avg_duration": DEFAULT_AVG_DURATION_MS,
                "amplify": DEFAULT_AMPLIFY,
            },
            "audio": {
                "sample_rate": 44100,
                "channels": 1,
                "device_id": None,
                "buffer_size": 2048,
                "frame_rate": 60.0,
            },
        }

        config_path = cls.config_path()
        if config_path.exists():
            try:
                with open(config_path, "r") as f:
                    file_config = json.load(f)
                logger.info(f"Loading configuration from {config_path}")

                if not isinstance(file_config, dict):
                    raise ValueError(
                        f"top level is {type(file_config).__name__}, expected an object"
                    )

                for section, values in file_config.items():
                    if section not in config_dict or not isinstance(values, dict):
                        logger.warning(f"Ignoring unknown config section '{section}'")
                        continue
                    for key, value in values.items():
                        if key not in config_dict[section]:
                            logger.warning(f"Ignoring unknown config key '{section}.{key}'")
                            continue
                        config_dict[section][key] = value

            except ValueError as e:
                logger.error(
                    f"Configuration file is corrupted or contains invalid JSON: "
                    f"{config_path} ({e}). Using default configuration instead."
                )
            except OSError as e:
                logger.warning(f"Failed to load config from file: {e}")

        measurement = config_dict["measurement"]
        measurement["avg_duration"] = parse_float_env('MIC_VOLUME_AVG_DURATION', measurement["avg_duration"])
        measurement["amplify"] = parse_float_env('MIC_VOLUME_AMPLIFY', measurement["amplify"])

        audio = config_dict["audio"]
        audio["sample_rate"] = parse_int_env('MIC_VOLUME_SAMPLE_RATE', audio["sample_rate"])
        audio["channels"] = parse_int_env('MIC_VOLUME_CHANNELS', audio["channels"])
        audio["device_id"] = parse_int_env('MIC_VOLUME_DEVICE_ID', audio["device_id"])
        audio["buffer_size"] = parse_int_env('MIC_VOLUME_BUFFER_SIZE', audio["buffer_size"])
        audio["frame_rate"] = parse_float_env('MIC_VOLUME_FRAME_RATE', audio["frame_rate"])

        config = cls(
            measurement=MeasurementConfig(**measurement),
            audio=AudioConfig(**audio),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate every configuration section."""
        self.measurement.validate()
        self.audio.validate()
