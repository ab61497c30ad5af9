"""Input device discovery for the microphone source."""

import logging
from dataclasses import dataclass
from typing import List, Optional

import sounddevice as sd

from ..exceptions import AudioDeviceError

logger = logging.getLogger(__name__)


@dataclass
class InputDevice:
    """An audio device with at least one input channel."""
    id: int
    name: str
    channels: int
    sample_rate: float
    is_default: bool
    hostapi: str


def list_input_devices() -> List[InputDevice]:
    """
    List capture-capable devices.

    Raises:
        AudioDeviceError: If enumeration fails or no input device exists
    """
    try:
        devices = sd.query_devices()
        default_input = sd.default.device[0]
        found = [
            InputDevice(
                id=idx,
                name=info['name'],
                channels=info['max_input_channels'],
                sample_rate=info['default_samplerate'],
                is_default=(idx == default_input),
                hostapi=sd.query_hostapis(info['hostapi'])['name'],
            )
            for idx, info in enumerate(devices)
            if info['max_input_channels'] > 0
        ]
    except sd.PortAudioError as e:
        raise AudioDeviceError(f"Failed to enumerate audio devices: {e}") from e

    if not found:
        raise AudioDeviceError(
            "No audio input devices found. "
            "Please connect a microphone and ensure it's enabled."
        )

    logger.debug(f"Found {len(found)} input device(s)")
    return found


def resolve_input_device(
    device_id: Optional[int], sample_rate: int, channels: int
) -> InputDevice:
    """
    Pick the device to capture from and check it can deliver the format.

    Args:
        device_id: Device index, or None for the system default
        sample_rate: Required sample rate in Hz
        channels: Required channel count

    Returns:
        The selected InputDevice

    Raises:
        AudioDeviceError: If the device is missing or rejects the format
    """
    devices = list_input_devices()

    if device_id is None:
        device = next((d for d in devices if d.is_default), None)
        if device is None:
            logger.warning("No default input device, using first available")
            device = devices[0]
    else:
        device = next((d for d in devices if d.id == device_id), None)
        if device is None:
            raise AudioDeviceError(
                f"Audio device {device_id} not found. "
                f"Available devices: {[d.id for d in devices]}"
            )

    if device.channels < channels:
        raise AudioDeviceError(
            f"Device '{device.name}' has only {device.channels} channel(s), "
            f"but {channels} required"
        )

    try:
        sd.check_input_settings(
            device=device.id,
            samplerate=sample_rate,
            channels=channels,
            dtype='float32',
        )
    except (sd.PortAudioError, ValueError) as e:
        raise AudioDeviceError(
            f"Device '{device.name}' doesn't support {sample_rate}Hz/{channels}ch: {e}"
        ) from e

    logger.info(f"Using input device '{device.name}' ({device.hostapi})")
    return device
