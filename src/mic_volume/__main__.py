"""CLI interface for mic-volume."""

import argparse
import logging
import sys
from dataclasses import replace
from typing import Callable, TextIO

from . import MicVolumeConfig, VolumeReport, __version__, measure_microphone_volume
from .exceptions import MicVolumeError


def create_level_bar(value: float, max_value: float = 1.0, width: int = 30) -> str:
    """Create a text level bar, clamped to ``width`` cells."""
    if max_value <= 0:
        return "░" * width
    filled = int(max(0.0, min(1.0, value / max_value)) * width)
    return "█" * filled + "░" * (width - filled)


def make_printer(stream: TextIO, scale: float) -> Callable[[VolumeReport], None]:
    """Return an observer that redraws one status line per report."""
    def print_report(report: VolumeReport) -> None:
        stream.write(
            f"\r  Volume: {create_level_bar(report.value, scale)} {report.value:6.3f}  |  "
            f"Avg: {create_level_bar(report.avg, scale)} {report.avg:6.3f}"
        )
        stream.flush()

    return print_report


def list_devices() -> int:
    """Print the available input devices."""
    from .audio.devices import list_input_devices

    for device in list_input_devices():
        marker = "*" if device.is_default else " "
        print(
            f"{marker} {device.id:3d}  {device.name}  "
            f"({device.channels}ch, {device.sample_rate:.0f}Hz, {device.hostapi})"
        )
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Show live microphone volume and its sliding-window average",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--avg-duration", type=float, metavar="MS",
        help="Averaging window in milliseconds (default: 2000)",
    )
    parser.add_argument(
        "--amplify", type=float,
        help="Multiplier applied to the raw RMS (default: 10)",
    )
    parser.add_argument("--device", type=int, help="Input device ID (default: system default)")
    parser.add_argument(
        "--list-devices", action="store_true", help="List input devices and exit"
    )
    parser.add_argument(
        "--duration", type=float, metavar="SECONDS",
        help="Stop after this many seconds (default: run until Ctrl+C)",
    )
    parser.add_argument("--fps", type=float, help="Frames per second (default: 60)")
    parser.add_argument(
        "--verbose", action="store_true", help="Show detailed progress"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(levelname)s: %(message)s',
            stream=sys.stderr,
        )
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        if args.list_devices:
            return list_devices()

        config = MicVolumeConfig.load()

        options = {
            "avg_duration": config.measurement.avg_duration,
            "amplify": config.measurement.amplify,
        }
        if args.avg_duration is not None:
            options["avg_duration"] = args.avg_duration
        if args.amplify is not None:
            options["amplify"] = args.amplify

        audio_config = config.audio
        if args.device is not None:
            audio_config = replace(audio_config, device_id=args.device)
        if args.fps is not None:
            audio_config = replace(audio_config, frame_rate=args.fps)

        if args.verbose:
            print(
                f"Measuring (avg {options['avg_duration']:.0f}ms, amplify {options['amplify']:g})...",
                file=sys.stderr,
            )

        loop = measure_microphone_volume(
            make_printer(sys.stdout, scale=1.0),
            options,
            audio_config=audio_config,
            duration=args.duration,
        )
        print()

        if args.verbose:
            print(f"Frames measured: {loop.tick_count}", file=sys.stderr)

        return 0

    except MicVolumeError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
