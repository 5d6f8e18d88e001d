"""Streaming configuration and state models."""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional

from ..constants import DEFAULT_STREAMING_CONFIG
from ..errors import InvalidConfigError

logger = logging.getLogger(__name__)


class SpeechState(Enum):
    """Lifecycle state of the speech service."""
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"


@dataclass(frozen=True)
class StreamingConfig:
    """Immutable snapshot of the options for one recording session."""
    chunk_duration_seconds: float = DEFAULT_STREAMING_CONFIG["chunk_duration_seconds"]
    overlap_duration_seconds: float = DEFAULT_STREAMING_CONFIG["overlap_duration_seconds"]
    language: str = DEFAULT_STREAMING_CONFIG["language"]
    max_chunks: int = DEFAULT_STREAMING_CONFIG["max_chunks"]  # 0 = unbounded
    hot_word_enabled: bool = DEFAULT_STREAMING_CONFIG["hot_word_enabled"]
    hot_word_phrase: str = DEFAULT_STREAMING_CONFIG["hot_word_phrase"]

    @classmethod
    def from_dict(cls, overrides: Optional[Dict[str, Any]] = None) -> "StreamingConfig":
        """Build a config from partial overrides, falling back to defaults.

        Args:
            overrides: Mapping of option name to value. ``None`` values and
                unknown keys are ignored.

        Returns:
            New StreamingConfig
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in (overrides or {}).items():
            if key not in known:
                logger.debug(f"Ignoring unknown streaming option: {key}")
                continue
            if value is not None:
                values[key] = value
        return cls(**values)

    def validate(self) -> None:
        """Check option consistency.

        Raises:
            InvalidConfigError: If durations or limits are out of range
        """
        if self.chunk_duration_seconds <= 0:
            raise InvalidConfigError("Chunk duration must be greater than zero")
        if self.overlap_duration_seconds < 0:
            raise InvalidConfigError("Overlap duration cannot be negative")
        if self.overlap_duration_seconds >= self.chunk_duration_seconds:
            raise InvalidConfigError("Overlap must be less than chunk duration")
        if self.max_chunks < 0:
            raise InvalidConfigError("Max chunks cannot be negative")
