"""Data models for the SpeechStream application."""

from .streaming import SpeechState, StreamingConfig
from .transcription import ChunkData, ProgressiveResult, HotWordCheck
from .session import SessionText, HotWordConfig

__all__ = [
    "SpeechState",
    "StreamingConfig",
    "ChunkData",
    "ProgressiveResult",
    "HotWordCheck",
    "SessionText",
    "HotWordConfig",
]
