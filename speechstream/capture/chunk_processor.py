"""Detects finished ffmpeg segment files and hands them over one at a time."""

import re
import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Set, Tuple

from ..constants import CHUNK_FILE_PREFIX, CHUNK_FILE_EXTENSION

logger = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(rf"^{re.escape(CHUNK_FILE_PREFIX)}(\d+){re.escape(CHUNK_FILE_EXTENSION)}$")


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


@dataclass
class _Watch:
    """State of one watch; a new one is created per start_watching call."""
    process: Any
    output_dir: Path
    stop_event: asyncio.Event
    flush: bool = True
    surfaced: Set[Path] = field(default_factory=set)
    task: Optional[asyncio.Task] = None

    def process_exited(self) -> bool:
        return self.process is not None and self.process.returncode is not None


class ChunkProcessor:
    """Polls a segment directory and surfaces completed chunk files.

    ffmpeg's segment muxer only opens ``chunk_N+1`` after closing ``chunk_N``,
    so every segment except the newest is complete. The newest one is
    surfaced once the capture process has exited or on a flushing stop.

    Chunks are surfaced in segment order, each exactly once, and the next
    chunk is not surfaced until ``on_chunk_ready`` for the previous one has
    returned.
    """

    def __init__(self,
                 on_chunk_ready: Callable[[str], Awaitable[None]],
                 on_chunk_error: Optional[Callable[[Exception], None]] = None,
                 on_complete: Optional[Callable[[], None]] = None,
                 poll_interval: float = 0.1):
        """Initialize chunk processor.

        Args:
            on_chunk_ready: Coroutine function called with each finished chunk path
            on_chunk_error: Called when scanning or a chunk callback fails
            on_complete: Called when a watch loop finishes (not on cancel)
            poll_interval: Seconds between directory scans
        """
        self.on_chunk_ready = on_chunk_ready
        self.on_chunk_error = on_chunk_error
        self.on_complete = on_complete
        self.poll_interval = poll_interval
        self._watch: Optional[_Watch] = None

    @property
    def is_watching(self) -> bool:
        return self._watch is not None and self._watch.task is not None and not self._watch.task.done()

    def start_watching(self, process, output_dir: str) -> None:
        """Start watching ``output_dir`` for segments written by ``process``.

        Must be called from a running event loop.
        """
        if self._watch is not None:
            logger.warning("Chunk processor restarted while still watching; abandoning old watch")
            self.cancel()

        watch = _Watch(process=process, output_dir=Path(output_dir), stop_event=asyncio.Event())
        watch.task = asyncio.ensure_future(self._watch_loop(watch))
        self._watch = watch
        logger.info(f"Watching for chunks in {watch.output_dir}")

    async def stop_watching(self, flush: bool = True) -> None:
        """Stop watching.

        Args:
            flush: Surface every remaining segment, including the newest, before
                returning. When False no further chunks are surfaced.
        """
        watch = self._watch
        if watch is None:
            return

        watch.flush = flush
        watch.stop_event.set()

        if watch.task is _current_task():
            # Called from inside on_chunk_ready; the loop ends once it returns
            return

        await asyncio.wait({watch.task})
        if self._watch is watch:
            self._watch = None
        if not watch.task.cancelled() and watch.task.exception() is not None:
            logger.error(f"Chunk watcher failed: {watch.task.exception()}")

    def cancel(self) -> None:
        """Abandon the watch immediately, including any chunk in flight."""
        watch = self._watch
        self._watch = None
        if watch is None:
            return
        watch.flush = False
        watch.stop_event.set()
        if not watch.task.done() and watch.task is not _current_task():
            watch.task.cancel()

    def _report_error(self, error: Exception) -> None:
        if self.on_chunk_error:
            self.on_chunk_error(error)

    @staticmethod
    def _list_segments(output_dir: Path) -> List[Tuple[int, Path]]:
        """List segment files ordered by segment number."""
        segments = []
        for path in output_dir.iterdir():
            match = _SEGMENT_RE.match(path.name)
            if match:
                segments.append((int(match.group(1)), path))
        segments.sort()
        return segments

    async def _surface_ready(self, watch: _Watch, include_last: bool) -> None:
        try:
            segments = self._list_segments(watch.output_dir)
        except OSError as e:
            logger.error(f"Failed to scan chunk directory {watch.output_dir}: {e}")
            self._report_error(e)
            return

        if segments and not include_last:
            segments = segments[:-1]

        for _, path in segments:
            if path in watch.surfaced:
                continue
            if watch.stop_event.is_set() and not watch.flush:
                return
            watch.surfaced.add(path)
            logger.debug(f"Chunk ready: {path.name}")
            try:
                await self.on_chunk_ready(str(path))
            except Exception as e:
                logger.error(f"Chunk callback failed for {path.name}: {e}", exc_info=True)
                self._report_error(e)

    async def _watch_loop(self, watch: _Watch) -> None:
        while not watch.stop_event.is_set():
            exited = watch.process_exited()
            await self._surface_ready(watch, include_last=exited)
            if exited:
                logger.info(f"Capture process exited with code {watch.process.returncode}")
                break
            try:
                await asyncio.wait_for(watch.stop_event.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass

        if watch.flush:
            await self._surface_ready(watch, include_last=True)

        logger.debug(f"Chunk watcher finished, {len(watch.surfaced)} chunks surfaced")
        if self._watch is watch:
            self._watch = None
        if self.on_complete:
            self.on_complete()
