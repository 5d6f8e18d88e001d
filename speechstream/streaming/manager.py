"""Session transcript accumulation for streaming transcription."""

import logging
from dataclasses import replace

from ..constants import HOT_WORD_PHRASE
from ..models.session import HotWordConfig, SessionText
from ..models.transcription import HotWordCheck
from .dedup import deduplicate_overlap
from .hot_word import check_hot_word

logger = logging.getLogger(__name__)


class StreamingManager:
    """Stitches chunk transcripts into one session transcript.

    Handles:
    - Session text accumulation
    - Word-level deduplication between overlapping chunks
    - Previous chunk text tracking for overlap detection
    - Hot word detection for auto-send

    Calls must be serialized by the caller; there is no locking.
    """

    def __init__(self):
        self._session = SessionText()
        self._hot_word = HotWordConfig()

    def configure_hot_word(self, enabled: bool, phrase: str = HOT_WORD_PHRASE) -> None:
        """Configure hot word detection.

        Args:
            enabled: Whether hot word detection is enabled
            phrase: Phrase to detect, stored lowercase
        """
        self._hot_word = HotWordConfig(enabled=enabled, phrase=phrase.lower())
        logger.info(f"Hot word detection {'enabled' if enabled else 'disabled'}: '{phrase}'")

    def add_chunk_text(self, chunk_id: int, text: str) -> str:
        """Merge a chunk transcript into the session text.

        Args:
            chunk_id: Chunk identifier (for logging)
            text: Raw transcribed text from the chunk

        Returns:
            Text this chunk contributed after deduplication (may be empty)
        """
        deduplicated_text = deduplicate_overlap(self._session.previous_chunk_text, text)

        session_text = self._session.text
        if deduplicated_text:
            session_text = f"{session_text} {deduplicated_text}" if session_text else deduplicated_text
            logger.debug(
                f"Chunk {chunk_id}: added {len(deduplicated_text)} chars, "
                f"session total: {len(session_text)} chars"
            )
        else:
            logger.debug(f"Chunk {chunk_id}: no new text after deduplication")

        # The next overlap reference is what was actually said, not the trimmed text
        self._session = replace(self._session, text=session_text, previous_chunk_text=text)
        return deduplicated_text

    def check_hot_word(self) -> HotWordCheck:
        """Check the current session text for the configured hot word."""
        return check_hot_word(self._session.text, self._hot_word.enabled, self._hot_word.phrase)

    def get_session_text(self) -> str:
        return self._session.text

    def get_previous_chunk_text(self) -> str:
        return self._session.previous_chunk_text

    @property
    def hot_word_config(self) -> HotWordConfig:
        return self._hot_word

    def reset(self) -> None:
        """Drop the session text; hot word configuration is kept."""
        self._session = SessionText()
        logger.debug("Streaming state reset")
