"""Services layer for SpeechStream application logic."""

from .speech_service import SpeechService, StreamingSession

__all__ = [
    "SpeechService",
    "StreamingSession",
]
