"""Rich console rendering of speech service events."""

import asyncio
import logging
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..events import (
    SpeechEventPublisher,
    PROGRESSIVE_UPDATE,
    HOT_WORD_DETECTED,
    STREAMING_COMPLETE,
    STREAMING_ERROR,
)
from ..models import ProgressiveResult

logger = logging.getLogger(__name__)


class ConsoleRenderer:
    """Prints the live transcript and signals when the session completes."""

    def __init__(self, events: SpeechEventPublisher, console: Optional[Console] = None):
        self.events = events
        self.console = console or Console()
        self.finished = asyncio.Event()
        self.final_text: Optional[str] = None
        self.total_chunks = 0
        self.hot_word_text: Optional[str] = None

        events.subscribe(self.on_progressive_update, PROGRESSIVE_UPDATE)
        events.subscribe(self.on_hot_word_detected, HOT_WORD_DETECTED)
        events.subscribe(self.on_streaming_complete, STREAMING_COMPLETE)
        events.subscribe(self.on_streaming_error, STREAMING_ERROR)

    def on_progressive_update(self, result: ProgressiveResult) -> None:
        seconds = result.total_duration_ms / 1000.0
        self.console.print(f"[dim]{seconds:6.1f}s #{result.sequence_number:03d}[/dim] {result.text}")

    def on_hot_word_detected(self, cleaned_text: str) -> None:
        self.hot_word_text = cleaned_text
        self.console.print("🔔 Hot word detected, sending message", style="bold green")

    def on_streaming_complete(self, final_text: str, total_chunks: int) -> None:
        self.final_text = final_text
        self.total_chunks = total_chunks
        self.finished.set()

    def on_streaming_error(self, message: str) -> None:
        self.console.print(f"❌ {message}", style="bold red")

    def show_status(self, message: str) -> None:
        self.console.print(message, style="blue")

    def show_summary(self) -> None:
        """Print the text the session produced."""
        text = self.hot_word_text if self.hot_word_text is not None else self.final_text
        body = Text(text or "(no speech transcribed)")
        title = "Message" if self.hot_word_text is not None else "Transcript"
        self.console.print(Panel(body, title=f"{title} ({self.total_chunks} chunks)", border_style="green"))

    def close(self) -> None:
        for listener, event_name in (
            (self.on_progressive_update, PROGRESSIVE_UPDATE),
            (self.on_hot_word_detected, HOT_WORD_DETECTED),
            (self.on_streaming_complete, STREAMING_COMPLETE),
            (self.on_streaming_error, STREAMING_ERROR),
        ):
            self.events.unsubscribe(listener, event_name)
