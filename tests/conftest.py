"""Pytest configuration and fixtures for SpeechStream tests."""

import asyncio
import logging
import tempfile
import uuid
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from speechstream.events import (
    SpeechEventPublisher,
    PROGRESSIVE_UPDATE,
    CHUNK_PROCESSED,
    HOT_WORD_DETECTED,
    STREAMING_COMPLETE,
    STREAMING_ERROR,
)
from speechstream.transcription import AbstractTranscriptionClient


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without audio hardware or network")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


def write_chunk(directory, index: int, size: int = 2048) -> Path:
    """Write a fake segment file the way ffmpeg names them."""
    path = Path(directory) / f"chunk_{index:03d}.webm"
    path.write_bytes(b'\x1a' * size)
    return path


class FakeProcess:
    """Stands in for an asyncio subprocess running ffmpeg."""

    def __init__(self, exit_on_terminate: bool = True):
        self.returncode: Optional[int] = None
        self.stderr = None
        self.exit_on_terminate = exit_on_terminate
        self.terminated = False
        self.killed = False
        self._exited = asyncio.Event()

    def exit(self, code: int = 0) -> None:
        if self.returncode is None:
            self.returncode = code
            self._exited.set()

    def terminate(self) -> None:
        self.terminated = True
        if self.exit_on_terminate:
            self.exit(255)

    def kill(self) -> None:
        self.killed = True
        self.exit(-9)

    async def wait(self) -> int:
        await self._exited.wait()
        return self.returncode


class FakeTranscriptionClient(AbstractTranscriptionClient):
    """Returns scripted texts per chunk file name."""

    def __init__(self, texts: Optional[Dict[str, object]] = None, default: str = "", initialized: bool = True):
        self.texts = texts or {}
        self.default = default
        self.initialized = initialized
        self.calls: List[Dict[str, Optional[str]]] = []

    def initialize(self) -> bool:
        return self.initialized

    async def transcribe(self, audio_path: str, language=None, prompt=None) -> str:
        name = Path(audio_path).name
        self.calls.append({"name": name, "language": language, "prompt": prompt})
        text = self.texts.get(name, self.default)
        if isinstance(text, Exception):
            raise text
        return text


class GatedTranscriptionClient(FakeTranscriptionClient):
    """Holds every transcription until release is set."""

    def __init__(self, texts: Optional[Dict[str, object]] = None, default: str = ""):
        super().__init__(texts=texts, default=default)
        self.release = asyncio.Event()
        self.pending = 0

    async def transcribe(self, audio_path: str, language=None, prompt=None) -> str:
        self.pending += 1
        try:
            await self.release.wait()
        finally:
            self.pending -= 1
        return await super().transcribe(audio_path, language=language, prompt=prompt)


class EventRecorder:
    """Subscribes to every speech event and records the payloads."""

    def __init__(self, events: SpeechEventPublisher):
        self.events = events
        self.progressive: List = []
        self.processed: List = []
        self.hot_words: List[str] = []
        self.completed: List = []
        self.errors: List[str] = []
        self._subscriptions = (
            (self.on_progressive_update, PROGRESSIVE_UPDATE),
            (self.on_chunk_processed, CHUNK_PROCESSED),
            (self.on_hot_word_detected, HOT_WORD_DETECTED),
            (self.on_streaming_complete, STREAMING_COMPLETE),
            (self.on_streaming_error, STREAMING_ERROR),
        )
        for listener, event_name in self._subscriptions:
            events.subscribe(listener, event_name)

    def on_progressive_update(self, result):
        self.progressive.append(result)

    def on_chunk_processed(self, chunk_id, text):
        self.processed.append((chunk_id, text))

    def on_hot_word_detected(self, cleaned_text):
        self.hot_words.append(cleaned_text)

    def on_streaming_complete(self, final_text, total_chunks):
        self.completed.append((final_text, total_chunks))

    def on_streaming_error(self, message):
        self.errors.append(message)

    def close(self):
        for listener, event_name in self._subscriptions:
            self.events.unsubscribe(listener, event_name)


@pytest.fixture
def events():
    """Publisher on a topic root private to the test."""
    return SpeechEventPublisher(root=f"speech_{uuid.uuid4().hex[:8]}")


@pytest.fixture
def recorder(events):
    recorder = EventRecorder(events)
    yield recorder
    recorder.close()
