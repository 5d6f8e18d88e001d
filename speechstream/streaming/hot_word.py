"""Hot word detection on the accumulated transcript."""

import re
import logging

from ..models.transcription import HotWordCheck

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def check_hot_word(session_text: str, enabled: bool, phrase: str) -> HotWordCheck:
    """Look for ``phrase`` in ``session_text`` and cut out its first occurrence.

    Args:
        session_text: Accumulated transcript
        enabled: Whether detection is active
        phrase: Trigger phrase, matched case-insensitively

    Returns:
        HotWordCheck; on detection ``cleaned_text`` has the phrase removed,
        whitespace runs collapsed to one space and both ends trimmed.
    """
    if not enabled or not session_text or not phrase:
        return HotWordCheck(detected=False, cleaned_text=session_text)

    match = re.search(re.escape(phrase), session_text, re.IGNORECASE)
    if match is None:
        return HotWordCheck(detected=False, cleaned_text=session_text)

    before = session_text[:match.start()]
    after = session_text[match.end():]
    cleaned_text = _WHITESPACE_RE.sub(" ", before + " " + after).strip()

    logger.info(f"Hot word detected: '{phrase}'")
    logger.debug(f"Cleaned text: '{cleaned_text}'")
    return HotWordCheck(detected=True, cleaned_text=cleaned_text)
