"""Speech service event publishing over pypubsub."""

import logging
from typing import Callable

from pubsub import pub

from ..models.transcription import ProgressiveResult

logger = logging.getLogger(__name__)

PROGRESSIVE_UPDATE = "progressive_update"
CHUNK_PROCESSED = "chunk_processed"
HOT_WORD_DETECTED = "hot_word_detected"
STREAMING_COMPLETE = "streaming_complete"
STREAMING_ERROR = "streaming_error"

EVENT_NAMES = (
    PROGRESSIVE_UPDATE,
    CHUNK_PROCESSED,
    HOT_WORD_DETECTED,
    STREAMING_COMPLETE,
    STREAMING_ERROR,
)


class SpeechEventPublisher:
    """Publishes speech service lifecycle and progress events.

    Each event lives on its own flat topic prefixed by ``root`` (``speech_progressive_update``
    and so on), so separate service instances can use separate roots.
    Listener signatures per event:

    - progressive_update(result)
    - chunk_processed(chunk_id, text)
    - hot_word_detected(cleaned_text)
    - streaming_complete(final_text, total_chunks)
    - streaming_error(message)
    """

    def __init__(self, root: str = "speech"):
        """Initialize publisher.

        Args:
            root: Topic root shared by all events of this publisher
        """
        self.root = root
        logger.debug(f"SpeechEventPublisher initialized with root topic: {root}")

    def topic(self, event_name: str) -> str:
        """Get the full topic name for an event."""
        if event_name not in EVENT_NAMES:
            raise ValueError(f"Unknown speech event: {event_name}")
        return f"{self.root}_{event_name}"

    def subscribe(self, listener: Callable, event_name: str) -> None:
        """Register a listener for an event.

        pypubsub holds listeners weakly; the caller must keep a reference.
        """
        pub.subscribe(listener, self.topic(event_name))

    def unsubscribe(self, listener: Callable, event_name: str) -> None:
        pub.unsubscribe(listener, self.topic(event_name))

    def progressive_update(self, result: ProgressiveResult) -> None:
        pub.sendMessage(self.topic(PROGRESSIVE_UPDATE), result=result)
        logger.debug(f"Published progressive update for chunk {result.chunk_id}")

    def chunk_processed(self, chunk_id: int, text: str) -> None:
        pub.sendMessage(self.topic(CHUNK_PROCESSED), chunk_id=chunk_id, text=text)

    def hot_word_detected(self, cleaned_text: str) -> None:
        pub.sendMessage(self.topic(HOT_WORD_DETECTED), cleaned_text=cleaned_text)

    def streaming_complete(self, final_text: str, total_chunks: int) -> None:
        pub.sendMessage(self.topic(STREAMING_COMPLETE), final_text=final_text, total_chunks=total_chunks)
        logger.debug(f"Published streaming complete: {total_chunks} chunks")

    def streaming_error(self, message: str) -> None:
        pub.sendMessage(self.topic(STREAMING_ERROR), message=message)
