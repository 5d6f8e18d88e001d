"""Transcription-related data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChunkData:
    """A captured audio chunk handed to the service for transcription."""
    chunk_id: int
    file_path: str
    sequence_number: int
    arrived_at: float  # Seconds since recording start


@dataclass(frozen=True)
class ProgressiveResult:
    """Transcript snapshot published after each merged chunk."""
    chunk_id: int
    text: str  # Full session text so far
    total_duration_ms: int  # Time since recording start
    sequence_number: int
    is_interim: bool = False


@dataclass(frozen=True)
class HotWordCheck:
    """Outcome of a hot word check against the session text."""
    detected: bool
    cleaned_text: str
