"""Session-related data models."""

from dataclasses import dataclass

from ..constants import HOT_WORD_PHRASE


@dataclass(frozen=True)
class SessionText:
    """Accumulated transcript of one recording session.

    Replaced wholesale on every merge and on reset.
    """
    text: str = ""
    previous_chunk_text: str = ""  # Raw text of the last merged chunk


@dataclass(frozen=True)
class HotWordConfig:
    """Hot word settings; survive session resets."""
    enabled: bool = False
    phrase: str = HOT_WORD_PHRASE  # Stored lowercase
