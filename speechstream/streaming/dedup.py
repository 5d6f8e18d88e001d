"""Word-level overlap removal between consecutive chunk transcripts."""

import logging

from ..constants import MAX_OVERLAP_WORDS

logger = logging.getLogger(__name__)


def deduplicate_overlap(previous_text: str, current_text: str) -> str:
    """Strip the leading words of ``current_text`` already heard in ``previous_text``.

    Consecutive chunks share a short tail of audio, so the start of one
    transcript often repeats the end of the previous one. The last N words of
    the previous text are compared against the first N words of the current
    text (case-insensitive, N <= 5) and the longest exact match is removed.

    Args:
        previous_text: Raw transcript of the previous chunk
        current_text: Raw transcript of the current chunk

    Returns:
        Current text without the overlapping words, joined by single spaces.
        Returned unchanged when there is no previous text.
    """
    if not previous_text:
        return current_text

    prev_words = previous_text.split()
    curr_words = current_text.split()

    overlap_length = 0
    max_overlap = min(MAX_OVERLAP_WORDS, len(prev_words), len(curr_words))

    # Keep scanning after a hit: the longest match wins
    for i in range(1, max_overlap + 1):
        prev_suffix = " ".join(prev_words[-i:]).lower()
        curr_prefix = " ".join(curr_words[:i]).lower()
        if prev_suffix == curr_prefix:
            overlap_length = i

    if overlap_length > 0:
        logger.debug(
            f"Detected {overlap_length}-word overlap: "
            f"'{' '.join(curr_words[:overlap_length])}'"
        )

    return " ".join(curr_words[overlap_length:])
