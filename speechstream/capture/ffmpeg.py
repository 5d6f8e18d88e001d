"""FFmpeg discovery and argument building for segmented microphone capture."""

import os
import sys
import shutil
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# platform -> (input format, default input device)
_PLATFORM_PROFILES = {
    "linux": ("pulse", "default"),
    "darwin": ("avfoundation", ":0"),
    "win32": ("dshow", "audio=Microphone"),
}


@dataclass(frozen=True)
class FFmpegAvailability:
    """Result of looking up the ffmpeg executable."""
    available: bool
    path: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class FFmpegConfig:
    """Microphone capture profile for one platform."""
    platform: str
    input_format: str
    input_device: str
    sample_rate: int = 16000
    channels: int = 1
    codec: str = "libopus"
    bitrate: str = "32k"

    def get_args(self, output_path: str) -> List[str]:
        """Build ffmpeg arguments that record the microphone into ``output_path``.

        The output path is always the last argument.
        """
        return [
            "-hide_banner",
            "-nostdin",
            "-nostats",
            "-loglevel", "error",
            "-f", self.input_format,
            "-i", self.input_device,
            "-ac", str(self.channels),
            "-ar", str(self.sample_rate),
            "-c:a", self.codec,
            "-b:a", self.bitrate,
            output_path,
        ]


def check_ffmpeg_availability(ffmpeg_path: Optional[str] = None) -> FFmpegAvailability:
    """Check if FFmpeg can be executed.

    Args:
        ffmpeg_path: Explicit executable path; when omitted ffmpeg is looked up on PATH

    Returns:
        FFmpegAvailability with the resolved path or an error message
    """
    if ffmpeg_path:
        if os.path.isfile(ffmpeg_path) and os.access(ffmpeg_path, os.X_OK):
            return FFmpegAvailability(available=True, path=ffmpeg_path)
        return FFmpegAvailability(
            available=False,
            error=f"FFmpeg not found or not executable at configured path: {ffmpeg_path}",
        )

    found = shutil.which("ffmpeg")
    if found is None:
        return FFmpegAvailability(
            available=False,
            error="FFmpeg is not installed or not in PATH",
        )
    logger.debug(f"Using ffmpeg at {found}")
    return FFmpegAvailability(available=True, path=found)


def get_ffmpeg_config(platform: Optional[str] = None,
                      overrides: Optional[Dict[str, str]] = None) -> Optional[FFmpegConfig]:
    """Get the capture profile for a platform.

    Args:
        platform: ``sys.platform`` style name (defaults to the current one)
        overrides: Optional ``input_format`` / ``input_device`` replacements

    Returns:
        FFmpegConfig, or None if the platform is not supported
    """
    platform = platform or sys.platform
    if platform.startswith("linux"):
        platform = "linux"

    profile = _PLATFORM_PROFILES.get(platform)
    if profile is None:
        logger.warning(f"No capture profile for platform: {platform}")
        return None

    input_format, input_device = profile
    config = FFmpegConfig(platform=platform, input_format=input_format, input_device=input_device)
    if overrides:
        config = replace(config, **overrides)
    return config


def build_streaming_args(base_args: List[str], output_pattern: str, segment_seconds: float) -> List[str]:
    """Turn single-file capture args into segmented chunk output.

    Segment muxer options are inserted right before ``output_pattern``. If the
    pattern is not among the args they are returned unchanged.
    """
    args = list(base_args)
    try:
        output_index = args.index(output_pattern)
    except ValueError:
        logger.warning(f"Output pattern {output_pattern} not found in ffmpeg args")
        return args

    args[output_index:output_index] = [
        "-f", "segment",
        "-segment_time", f"{segment_seconds:g}",
        "-reset_timestamps", "1",
    ]
    return args
