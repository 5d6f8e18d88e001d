"""Abstract base class for transcription clients."""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional


class AbstractTranscriptionClient(ABC):
    """Turns one audio file into text."""

    @abstractmethod
    def initialize(self) -> bool:
        """Verify configuration (credentials etc.) before a session starts.

        Returns:
            True if the client is ready

        Raises:
            ConfigurationError: If the client cannot be used
        """
        pass

    @abstractmethod
    async def transcribe(self, audio_path: str,
                         language: Optional[str] = None,
                         prompt: Optional[str] = None) -> str:
        """Transcribe an audio file.

        Args:
            audio_path: Path to the audio file
            language: ISO language hint (e.g. 'en')
            prompt: Context text guiding the model (previous transcript, vocabulary)

        Returns:
            Transcribed text, empty string for silence or unusable files
        """
        pass

    async def transcribe_batch(self, audio_paths: List[str],
                               language: Optional[str] = None,
                               prompt: Optional[str] = None) -> List[str]:
        """Transcribe several files concurrently, preserving order."""
        return list(await asyncio.gather(
            *(self.transcribe(path, language=language, prompt=prompt) for path in audio_paths)
        ))

    def reset(self) -> None:
        """Drop cached state such as resolved credentials."""
