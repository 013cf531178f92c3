"""
Chunk rotation: lazily opens numbered chunk files, writes words, rotates on the word
threshold and tracks closes that finish in the background.

Failure contract: directory and file I/O errors are fatal and raised as
OutputDirectoryError / OutputStreamError. Errors from caller-supplied lifecycle
callbacks are logged and discarded; they never change what gets written.
"""

import asyncio
import enum
import inspect
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable

import aiofiles
import aiofiles.os

from chunky.config.chunking.models import ChunkOptions, StreamStats
from chunky.config.logging import get_logger
from chunky.services.chunking.errors import OutputDirectoryError, OutputStreamError
from chunky.utils.naming import chunk_path
from chunky.utils.time import monotonic

logger = get_logger(__name__)

# Rough per-close cost counted in the memory estimate
PENDING_CLOSE_ESTIMATE = 1024


class ChunkState(enum.Enum):
    """Lifecycle of the chunk at the current index."""

    UNINITIALIZED = "uninitialized"
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class RotatorState:
    """Running counters for one run. Owned by a single ChunkRotator; read through snapshot()."""

    chunk_index: int
    state: ChunkState = ChunkState.UNINITIALIZED
    words_in_chunk: int = 0
    words_processed: int = 0
    chunks_created: int = 0
    bytes_processed: int = 0
    input_pending: int = 0
    buffered: int = 0
    high_water_mark: int = 0


class ChunkRotator:
    """
    Consume words in order and spread them over chunk files of `words_per_chunk` words.

    A chunk file is created on the first word after a rotation, never before, so no
    empty files appear. Closing a finished chunk runs as a background task; at most
    `max_pending_closes` may be in flight, and close notifications are delivered in
    chunk order once each close has completed.
    """

    def __init__(self, options: ChunkOptions) -> None:
        self._options = options
        self._state = RotatorState(chunk_index=options.index_start)
        self._handle: Any = None
        self._path: str | None = None
        self._write_buffer: list[str] = []
        self._pending_closes: deque[asyncio.Task[None]] = deque()
        self._close_error: BaseException | None = None
        self._last_stats_emit = monotonic()

    @property
    def state(self) -> ChunkState:
        return self._state.state

    @property
    def current_path(self) -> str | None:
        """Path of the open chunk file, or None when no chunk is open."""
        return self._path

    @property
    def pending_closes(self) -> int:
        return len(self._pending_closes)

    def next_path(self) -> str:
        """Path the chunk at the current index is (or will be) written to."""
        opts = self._options
        return chunk_path(opts.out_dir, opts.file_stem, self._state.chunk_index, opts.file_ext, opts.index_width)

    async def record_input(self, nbytes: int, pending: int) -> None:
        """Count consumed input bytes; `pending` is text the tokenizer still holds back."""
        self._state.bytes_processed += nbytes
        self._state.input_pending = pending
        self._update_high_water_mark()
        if self._options.on_stats is not None and monotonic() - self._last_stats_emit > self._options.stats_interval:
            await self._emit_stats()

    async def on_token(self, token: str) -> None:
        """Write one word, opening a chunk first if needed and rotating once the chunk is full."""
        if self._state.state is ChunkState.CLOSED:
            raise RuntimeError("Rotator already reached end of input")
        self._raise_if_close_failed()

        if self._state.state is ChunkState.UNINITIALIZED:
            await self._open_chunk()
            await self._write(token)
        else:
            await self._write(self._options.output_delimiter + token)

        self._state.words_in_chunk += 1
        self._state.words_processed += 1
        await self._notify(self._options.on_progress, self._state.words_processed)

        if self._state.words_in_chunk >= self._options.words_per_chunk:
            await self._finish_chunk()
            self._state.chunk_index += 1
            self._state.state = ChunkState.UNINITIALIZED

    async def on_end_of_input(self) -> None:
        """Close the open chunk, if any, and wait until every close has completed."""
        if self._state.state is ChunkState.OPEN:
            await self._finish_chunk()
        self._state.state = ChunkState.CLOSED
        await self.wait_closed()
        if self._options.on_stats is not None:
            await self._emit_stats()

    async def wait_closed(self) -> None:
        """Wait for in-flight closes. Raises the first close failure."""
        if self._pending_closes:
            await asyncio.wait(list(self._pending_closes))
        self._raise_if_close_failed()

    async def abort(self) -> None:
        """
        Best-effort shutdown after a fatal error: try to end and close the open chunk,
        then settle in-flight closes. The open chunk gets no close notification.
        """
        handle, path = self._handle, self._path
        self._handle = None
        self._path = None
        self._state.state = ChunkState.CLOSED
        if handle is not None:
            data = "".join(self._write_buffer)
            try:
                if data:
                    await handle.write(data)
                await handle.close()
            except (OSError, ValueError) as e:
                logger.warning("Failed to close chunk during abort", extra={"path": path, "error": str(e)})
        self._write_buffer.clear()
        self._state.buffered = 0
        if self._pending_closes:
            await asyncio.wait(list(self._pending_closes))
        self._reap_closes()

    def snapshot(self) -> StreamStats:
        """Current counters. Never blocks."""
        return StreamStats(
            bytes_processed=self._state.bytes_processed,
            current_memory_usage=self._memory_usage(),
            high_water_mark=self._state.high_water_mark,
            chunks_created=self._state.chunks_created,
            words_processed=self._state.words_processed,
        )

    async def _open_chunk(self) -> None:
        out_dir = self._options.out_dir
        try:
            await aiofiles.os.makedirs(out_dir, exist_ok=True)
        except OSError as e:
            logger.warning("Output directory could not be created", extra={"out_dir": out_dir, "error": str(e)})
            raise OutputDirectoryError(out_dir, cause=e) from e

        path = self.next_path()
        try:
            self._handle = await aiofiles.open(path, "w", encoding=self._options.encoding, newline="")
        except OSError as e:
            logger.warning("Chunk file could not be opened", extra={"path": path, "error": str(e)})
            raise OutputStreamError(path, cause=e) from e

        self._path = path
        self._state.state = ChunkState.OPEN
        self._state.words_in_chunk = 0
        self._state.chunks_created += 1
        logger.debug("Chunk opened", extra={"path": path, "index": self._state.chunk_index})
        await self._notify(self._options.on_stream_open, path)

    async def _write(self, text: str) -> None:
        self._write_buffer.append(text)
        self._state.buffered += len(text)
        self._update_high_water_mark()
        if self._state.buffered >= self._options.write_buffer_size:
            await self._drain()

    async def _drain(self) -> None:
        """Hand buffered text to the file. Awaiting here is what slows the reader down."""
        if not self._write_buffer:
            return
        data = "".join(self._write_buffer)
        self._write_buffer.clear()
        self._state.buffered = 0
        try:
            await self._handle.write(data)
        except (OSError, ValueError) as e:
            logger.warning("Chunk write failed", extra={"path": self._path, "error": str(e)})
            raise OutputStreamError(self._path or "", cause=e) from e

    async def _finish_chunk(self) -> None:
        """Terminate the open chunk and schedule its close."""
        await self._write(self._options.line_terminator)
        await self._drain()
        handle, path = self._handle, self._path
        self._handle = None
        self._path = None
        await self._schedule_close(handle, path)

    async def _schedule_close(self, handle: Any, path: str) -> None:
        self._reap_closes()
        while len(self._pending_closes) >= self._options.max_pending_closes:
            await asyncio.wait([self._pending_closes[0]])
            self._reap_closes()
        previous = self._pending_closes[-1] if self._pending_closes else None
        task = asyncio.create_task(self._close(handle, path, previous))
        self._pending_closes.append(task)
        self._update_high_water_mark()

    async def _close(self, handle: Any, path: str, previous: asyncio.Task[None] | None) -> None:
        error: Exception | None = None
        try:
            await handle.close()
        except OSError as e:
            error = e
        # Notifications go out in chunk order
        if previous is not None:
            await asyncio.wait([previous])
        if error is not None:
            logger.warning("Chunk close failed", extra={"path": path, "error": str(error)})
            raise OutputStreamError(path, cause=error) from error
        logger.debug("Chunk closed", extra={"path": path})
        await self._notify(self._options.on_stream_close, path)

    def _reap_closes(self) -> None:
        while self._pending_closes and self._pending_closes[0].done():
            task = self._pending_closes.popleft()
            if task.cancelled():
                continue
            error = task.exception()
            if error is not None and self._close_error is None:
                self._close_error = error

    def _raise_if_close_failed(self) -> None:
        self._reap_closes()
        if self._close_error is not None:
            raise self._close_error

    def _memory_usage(self) -> int:
        return (
            self._state.input_pending
            + self._state.buffered
            + len(self._pending_closes) * PENDING_CLOSE_ESTIMATE
        )

    def _update_high_water_mark(self) -> None:
        usage = self._memory_usage()
        if usage > self._state.high_water_mark:
            self._state.high_water_mark = usage

    async def _emit_stats(self) -> None:
        self._last_stats_emit = monotonic()
        await self._notify(self._options.on_stats, self.snapshot())

    async def _notify(self, callback: Callable[..., Any] | None, *args: Any) -> None:
        """Run a lifecycle callback; plain and async callables both work. Failures are swallowed."""
        if callback is None:
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.debug(
                "Lifecycle callback failed",
                extra={"callback": getattr(callback, "__name__", repr(callback)), "error": str(e)},
            )
