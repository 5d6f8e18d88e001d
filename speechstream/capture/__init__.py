"""Audio capture collaborators: ffmpeg discovery/arguments and chunk watching."""

from .ffmpeg import (
    FFmpegAvailability,
    FFmpegConfig,
    check_ffmpeg_availability,
    get_ffmpeg_config,
    build_streaming_args,
)
from .chunk_processor import ChunkProcessor

__all__ = [
    "FFmpegAvailability",
    "FFmpegConfig",
    "check_ffmpeg_availability",
    "get_ffmpeg_config",
    "build_streaming_args",
    "ChunkProcessor",
]
