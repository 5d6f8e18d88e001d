"""Speech service that drives streaming recording and chunk transcription."""

import os
import sys
import time
import shutil
import asyncio
import logging
import tempfile
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, Optional, Set, Union

from ..capture import ChunkProcessor, build_streaming_args, check_ffmpeg_availability, get_ffmpeg_config
from ..config import SpeechStreamConfig
from ..constants import (
    CHUNK_FILE_PATTERN,
    START_GRACE_PERIOD_SECONDS,
    STOP_GRACE_TIMEOUT_SECONDS,
    WHISPER_CUSTOM_GLOSSARY,
)
from ..errors import (
    AlreadyRecordingError,
    CaptureProcessError,
    NotRecordingError,
    ConfigurationError,
    SpeechStreamError,
    ToolUnavailableError,
)
from ..events import SpeechEventPublisher
from ..models import ChunkData, ProgressiveResult, SpeechState, StreamingConfig
from ..streaming import StreamingManager
from ..transcription import AbstractTranscriptionClient, ProviderSettingsManager, WhisperTranscriptionClient

logger = logging.getLogger(__name__)


@dataclass
class StreamingSession:
    """Everything owned by one recording; dropped as a whole on teardown."""
    config: StreamingConfig
    streaming_dir: str
    process: Any = None
    started_at: float = 0.0  # time.monotonic() at launch
    launched: bool = False  # survived the startup grace period
    processed_chunks: int = 0
    seen_paths: Set[str] = field(default_factory=set)
    stderr_task: Optional[asyncio.Task] = None
    stderr_tail: Deque[str] = field(default_factory=lambda: deque(maxlen=20))
    hot_word_fired: bool = False  # latched; later chunks are not merged


class SpeechService:
    """Orchestrates streaming speech-to-text.

    Architecture:
    - ffmpeg subprocess records the microphone into fixed-length chunk files
    - ChunkProcessor surfaces finished chunk files one at a time
    - AbstractTranscriptionClient turns each chunk into text
    - StreamingManager stitches chunk texts and detects the hot word
    - SpeechEventPublisher notifies listeners

    One recording at a time per instance. Lifecycle methods return result
    dictionaries instead of raising.
    """

    def __init__(self,
                 transcription_client: AbstractTranscriptionClient,
                 events: Optional[SpeechEventPublisher] = None,
                 ffmpeg_path: Optional[str] = None,
                 capture_overrides: Optional[Dict[str, str]] = None,
                 working_directory: Optional[str] = None,
                 keep_chunk_files: bool = False,
                 glossary: str = WHISPER_CUSTOM_GLOSSARY,
                 poll_interval: float = 0.1,
                 platform: Optional[str] = None):
        """Initialize speech service.

        Args:
            transcription_client: Client used for every chunk
            events: Event publisher (a default 'speech' publisher if None)
            ffmpeg_path: Explicit ffmpeg executable; looked up on PATH if None
            capture_overrides: ffmpeg input_format / input_device overrides
            working_directory: Parent of per-session chunk folders (system temp if None)
            keep_chunk_files: Leave chunk folders on disk after a session
            glossary: Vocabulary hint appended to every transcription prompt
            poll_interval: Seconds between chunk directory scans
            platform: Capture profile platform (current platform if None)
        """
        self.transcription_client = transcription_client
        self.events = events or SpeechEventPublisher()
        self.ffmpeg_path = ffmpeg_path
        self.capture_overrides = capture_overrides or {}
        self.working_directory = working_directory
        self.keep_chunk_files = keep_chunk_files
        self.glossary = glossary
        self.platform = platform

        self.streaming_manager = StreamingManager()
        self.chunk_processor = ChunkProcessor(
            on_chunk_ready=self._handle_chunk_ready,
            on_chunk_error=self._on_chunk_error,
            on_complete=self._on_capture_complete,
            poll_interval=poll_interval,
        )

        self._state = SpeechState.IDLE
        self._session: Optional[StreamingSession] = None

    @classmethod
    def from_config(cls, config: SpeechStreamConfig,
                    events: Optional[SpeechEventPublisher] = None) -> "SpeechService":
        """Build a service with a Whisper client from application configuration."""
        client = WhisperTranscriptionClient(
            ProviderSettingsManager(config.get_provider_profiles()),
            model=config.get('transcription.model', 'whisper-1'),
            response_format=config.get('transcription.response_format', 'verbose_json'),
            timeout_seconds=config.get('transcription.timeout_seconds', 30.0),
        )
        return cls(
            transcription_client=client,
            events=events,
            ffmpeg_path=config.get('capture.ffmpeg_path'),
            capture_overrides=config.get_capture_overrides(),
            working_directory=config.get_working_directory(),
            keep_chunk_files=bool(config.get('streaming.keep_chunk_files', False)),
            glossary=config.get('streaming.glossary', WHISPER_CUSTOM_GLOSSARY),
            poll_interval=config.get('capture.poll_interval_seconds', 0.1),
        )

    def get_state(self) -> SpeechState:
        return self._state

    def is_recording(self) -> bool:
        return self._state == SpeechState.RECORDING

    @property
    def processed_chunks(self) -> int:
        return self._session.processed_chunks if self._session else 0

    async def start_streaming_recording(
            self, config: Union[StreamingConfig, Dict[str, Any], None] = None) -> Dict[str, Any]:
        """Start recording with live chunk transcription.

        Args:
            config: Streaming options; a dict is merged onto the defaults

        Returns:
            Result dictionary with success status and details
        """
        if self._state != SpeechState.IDLE:
            return self._failure(AlreadyRecordingError("Already recording"))

        # Claimed before the first await so a concurrent start is rejected
        self._state = SpeechState.RECORDING

        try:
            session = await self._start_session(config)
        except SpeechStreamError as e:
            if isinstance(e, CaptureProcessError):
                self.events.streaming_error(str(e))
            self._reset_streaming_state()
            return self._failure(e)
        except Exception as e:
            logger.error(f"Error starting recording: {e}", exc_info=True)
            self._reset_streaming_state()
            return self._failure(e)

        if self._session is not session:
            return self._failure(NotRecordingError("Recording ended during startup"))

        logger.info(f"Started streaming recording in {session.streaming_dir}")
        return {
            "success": True,
            "streaming_dir": session.streaming_dir,
            "started_at": datetime.now().isoformat(),
        }

    async def _start_session(self, config: Union[StreamingConfig, Dict[str, Any], None]) -> StreamingSession:
        streaming_config = config if isinstance(config, StreamingConfig) else StreamingConfig.from_dict(config)
        streaming_config.validate()

        ffmpeg_check = check_ffmpeg_availability(self.ffmpeg_path)
        if not ffmpeg_check.available:
            raise ToolUnavailableError(ffmpeg_check.error)

        ffmpeg_config = get_ffmpeg_config(self.platform, self.capture_overrides)
        if ffmpeg_config is None:
            raise ToolUnavailableError(f"Unsupported platform: {self.platform or sys.platform}")

        # Credentials are checked before ffmpeg is launched
        if not self.transcription_client.initialize():
            raise ConfigurationError("Transcription client failed to initialize")

        if self.working_directory:
            os.makedirs(self.working_directory, exist_ok=True)
        streaming_dir = tempfile.mkdtemp(prefix="speechstream-", dir=self.working_directory)
        session = StreamingSession(config=streaming_config, streaming_dir=streaming_dir)
        self._session = session

        chunk_pattern = os.path.join(streaming_dir, CHUNK_FILE_PATTERN)
        args = build_streaming_args(
            ffmpeg_config.get_args(chunk_pattern),
            chunk_pattern,
            streaming_config.chunk_duration_seconds,
        )

        self.streaming_manager.reset()
        self.streaming_manager.configure_hot_word(
            streaming_config.hot_word_enabled,
            streaming_config.hot_word_phrase,
        )

        try:
            session.process = await self._launch_capture(ffmpeg_check.path, args)
        except OSError as e:
            raise CaptureProcessError(f"Failed to start FFmpeg: {e}") from e
        session.started_at = time.monotonic()

        if getattr(session.process, "stderr", None) is not None:
            session.stderr_task = asyncio.ensure_future(self._drain_stderr(session))

        self.chunk_processor.start_watching(session.process, streaming_dir)
        await self._await_launch(session)
        return session

    async def _launch_capture(self, ffmpeg_path: str, args):
        logger.info(f"Launching capture: {ffmpeg_path} {' '.join(args)}")
        return await asyncio.create_subprocess_exec(
            ffmpeg_path, *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )

    async def _await_launch(self, session: StreamingSession) -> None:
        """Wait out the startup grace period to surface immediate ffmpeg failures.

        Raises:
            CaptureProcessError: If ffmpeg exits during the grace period
        """
        try:
            await asyncio.wait_for(session.process.wait(), timeout=START_GRACE_PERIOD_SECONDS)
        except asyncio.TimeoutError:
            session.launched = True
            return

        if self._session is not session:
            # Cancelled or disposed during startup; the caller reports it
            return
        if session.stderr_task is not None:
            await asyncio.wait({session.stderr_task}, timeout=START_GRACE_PERIOD_SECONDS)
        raise CaptureProcessError(
            f"FFmpeg exited during startup with code {session.process.returncode}"
            f"{self._stderr_suffix(session)}"
        )

    async def _drain_stderr(self, session: StreamingSession) -> None:
        """Keep ffmpeg's stderr pipe empty and remember the last lines."""
        stream = session.process.stderr
        while True:
            line = await stream.readline()
            if not line:
                break
            text = line.decode(errors="replace").rstrip()
            if text:
                session.stderr_tail.append(text)
                logger.debug(f"ffmpeg: {text}")

    @staticmethod
    def _stderr_suffix(session: StreamingSession) -> str:
        return f": {session.stderr_tail[-1]}" if session.stderr_tail else ""

    async def stop_streaming_recording(self) -> Dict[str, Any]:
        """Stop recording once pending chunks are transcribed.

        Returns:
            Result dictionary with final_text and total_chunks
        """
        return await self._stop(flush=True)

    async def _stop(self, flush: bool) -> Dict[str, Any]:
        if self._state != SpeechState.RECORDING:
            return self._failure(NotRecordingError("Not recording"))

        session = self._session
        self._state = SpeechState.TRANSCRIBING

        try:
            # ffmpeg closes the last segment on exit, so the watcher flushes a complete file
            await self._terminate_capture(session.process)
            await self.chunk_processor.stop_watching(flush=flush)

            if self._session is not session:
                return self._failure(NotRecordingError("Recording was disposed while stopping"))

            total_chunks = session.processed_chunks
            final_text = self.streaming_manager.get_session_text()
            self.events.streaming_complete(final_text, total_chunks)
        except Exception as e:
            logger.error(f"Error stopping recording: {e}", exc_info=True)
            self._reset_streaming_state()
            return self._failure(e)

        self._reset_streaming_state()
        logger.info(f"Streaming stopped: {total_chunks} chunks, {len(final_text)} chars")
        return {
            "success": True,
            "final_text": final_text,
            "total_chunks": total_chunks,
            "stopped_at": datetime.now().isoformat(),
        }

    async def _terminate_capture(self, process) -> None:
        """Ask ffmpeg to exit, killing it after the grace timeout."""
        if process is None or process.returncode is not None:
            return

        try:
            process.terminate()
        except ProcessLookupError:
            return

        try:
            await asyncio.wait_for(process.wait(), timeout=STOP_GRACE_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.warning(f"FFmpeg did not exit within {STOP_GRACE_TIMEOUT_SECONDS}s, killing it")
            self._kill_capture(process)
            await process.wait()

    @staticmethod
    def _kill_capture(process) -> None:
        if process is None or process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            pass

    async def cancel_recording(self) -> Dict[str, Any]:
        """Abort recording, discarding in-flight chunks. No completion event."""
        if self._state != SpeechState.RECORDING:
            return self._failure(NotRecordingError("Not recording"))

        try:
            self._kill_capture(self._session.process if self._session else None)
        except Exception as e:
            logger.error(f"Error cancelling recording: {e}", exc_info=True)
            self._reset_streaming_state()
            return self._failure(e)

        self._reset_streaming_state()
        logger.info("Streaming recording cancelled")
        return {"success": True}

    async def _handle_chunk_ready(self, chunk_path: str) -> None:
        """Process one finished chunk; errors never leave this method."""
        session = self._session
        if session is None or self._state == SpeechState.IDLE:
            logger.debug(f"Ignoring chunk {chunk_path}: no active session")
            return
        if chunk_path in session.seen_paths:
            logger.warning(f"Ignoring duplicate chunk notification: {chunk_path}")
            return
        session.seen_paths.add(chunk_path)

        chunk_id = session.processed_chunks
        session.processed_chunks += 1
        chunk = ChunkData(
            chunk_id=chunk_id,
            file_path=chunk_path,
            sequence_number=chunk_id,
            arrived_at=time.monotonic() - session.started_at,
        )

        try:
            await self._process_chunk(session, chunk)
        except Exception as e:
            # A failed chunk never ends the session
            logger.error(f"Error processing chunk {chunk_id} (continuing): {e}", exc_info=True)

    async def _process_chunk(self, session: StreamingSession, chunk: ChunkData) -> None:
        if session.hot_word_fired:
            logger.debug(f"Skipping chunk {chunk.chunk_id}: hot word already triggered")
            return

        raw_text = await self._transcribe_file(chunk.file_path, session.config.language)

        if self._session is not session:
            logger.debug(f"Session ended while chunk {chunk.chunk_id} was transcribing")
            return

        if not raw_text or not raw_text.strip():
            logger.info(f"Skipping empty chunk {chunk.chunk_id} (silent audio)")
            return

        deduplicated_text = self.streaming_manager.add_chunk_text(chunk.chunk_id, raw_text)

        hot_word = self.streaming_manager.check_hot_word()
        if hot_word.detected:
            logger.info("Hot word detected, triggering auto-send")
            session.hot_word_fired = True
            self.events.hot_word_detected(hot_word.cleaned_text)
            if self._state == SpeechState.RECORDING:
                await self._stop(flush=False)
            return

        result = ProgressiveResult(
            chunk_id=chunk.chunk_id,
            text=self.streaming_manager.get_session_text(),
            total_duration_ms=int((time.monotonic() - session.started_at) * 1000),
            sequence_number=chunk.sequence_number,
        )
        self.events.progressive_update(result)
        self.events.chunk_processed(chunk.chunk_id, deduplicated_text)

        max_chunks = session.config.max_chunks
        if max_chunks > 0 and session.processed_chunks >= max_chunks and self._state == SpeechState.RECORDING:
            logger.info(f"Reached max chunks ({max_chunks}), stopping")
            await self._stop(flush=False)

    async def _transcribe_file(self, file_path: str, language: Optional[str]) -> str:
        """Transcribe a chunk, prompting with the previous chunk for continuity."""
        previous_text = self.streaming_manager.get_previous_chunk_text()
        prompt = "\n\n".join(part for part in (previous_text, self.glossary) if part)
        return await self.transcription_client.transcribe(
            file_path,
            language=language,
            prompt=prompt or None,
        )

    def _on_chunk_error(self, error: Exception) -> None:
        logger.error(f"Chunk processing error: {error}")
        self.events.streaming_error(str(error))

    def _on_capture_complete(self) -> None:
        """Watch loop ended; while still recording that means ffmpeg died."""
        session = self._session
        if session is None or not session.launched or self._state != SpeechState.RECORDING:
            return
        process = session.process
        if process is None or process.returncode is None:
            return

        message = f"FFmpeg exited unexpectedly with code {process.returncode}{self._stderr_suffix(session)}"
        logger.error(message)
        self.events.streaming_error(message)
        self._reset_streaming_state()

    def _reset_streaming_state(self) -> None:
        self.chunk_processor.cancel()
        self.streaming_manager.reset()
        session = self._session
        self._session = None
        self._state = SpeechState.IDLE

        if session is None:
            return
        if session.stderr_task is not None and not session.stderr_task.done():
            session.stderr_task.cancel()
        if not self.keep_chunk_files:
            shutil.rmtree(session.streaming_dir, ignore_errors=True)

    @staticmethod
    def _failure(error: Exception) -> Dict[str, Any]:
        logger.warning(f"Speech service operation failed: {error}")
        return {
            "success": False,
            "error": str(error) or type(error).__name__,
            "error_type": type(error).__name__,
        }

    def dispose(self) -> None:
        """Kill any capture process and clear all state. Safe from any state."""
        try:
            if self._session is not None:
                self._kill_capture(self._session.process)
        except Exception as e:
            logger.error(f"Error killing capture process during dispose: {e}")
        finally:
            self._reset_streaming_state()
        logger.info("SpeechService disposed")
