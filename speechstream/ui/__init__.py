"""Terminal user interface for SpeechStream."""

from .console import ConsoleRenderer

__all__ = ["ConsoleRenderer"]
