"""Transcription module for SpeechStream."""

from .base import AbstractTranscriptionClient
from .credentials import ProviderSettingsManager, DEFAULT_OPENAI_BASE_URL
from .whisper_client import WhisperTranscriptionClient

__all__ = [
    "AbstractTranscriptionClient",
    "ProviderSettingsManager",
    "DEFAULT_OPENAI_BASE_URL",
    "WhisperTranscriptionClient",
]
