"""Outbound speech service events."""

from .publisher import (
    SpeechEventPublisher,
    PROGRESSIVE_UPDATE,
    CHUNK_PROCESSED,
    HOT_WORD_DETECTED,
    STREAMING_COMPLETE,
    STREAMING_ERROR,
)

__all__ = [
    "SpeechEventPublisher",
    "PROGRESSIVE_UPDATE",
    "CHUNK_PROCESSED",
    "HOT_WORD_DETECTED",
    "STREAMING_COMPLETE",
    "STREAMING_ERROR",
]
