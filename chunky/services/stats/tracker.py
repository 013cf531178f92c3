"""Run statistics derived from rotator lifecycle callbacks. Observes only; never steers the pipeline."""

from datetime import datetime
from pathlib import Path

import aiofiles.os
from pydantic import BaseModel, Field

from chunky.services.chunking.errors import FileStatsError
from chunky.utils.time import monotonic, utc_now


class ChunkingStats(BaseModel):
    """Totals and rates for a multi-file chunking run."""

    started_at: datetime | None = None
    finished_at: datetime | None = None
    files_processed: int = Field(default=0, ge=0)
    total_words: int = Field(default=0, ge=0)
    chunks_created: int = Field(default=0, ge=0)
    chunks_closed: int = Field(default=0, ge=0, description="Chunk files fully written and closed")
    total_file_size: int = Field(default=0, ge=0, description="Sum of source file sizes in bytes")
    average_words_per_chunk: float = 0.0
    processing_time_ms: float = 0.0
    words_per_second: float = 0.0
    chunks_per_second: float = 0.0
    average_time_per_file: float = Field(default=0.0, description="Seconds per processed file")


class StatsTracker:
    """
    Collect counters across files. Wire on_stream_open / on_stream_close / on_progress
    into ChunkOptions; rates are derived on demand from the elapsed time.

    on_progress receives each run's cumulative word count, which restarts at zero for
    every file; the tracker folds it into a cross-file total.
    """

    def __init__(self) -> None:
        self._stats = ChunkingStats()
        self._start: float | None = None
        self._end: float | None = None
        self._words_before_file = 0
        self._words_in_file = 0
        self.current_file_size = 0

    def start(self) -> None:
        self._start = monotonic()
        self._end = None
        self._stats.started_at = utc_now()

    async def track_file(self, file_path: str | Path) -> None:
        """Record a source file's size. Raises FileStatsError when it cannot be stat-ed."""
        try:
            result = await aiofiles.os.stat(file_path)
        except OSError as e:
            raise FileStatsError(str(file_path), cause=e) from e
        self.current_file_size = result.st_size
        self._stats.total_file_size += result.st_size

    def complete_file(self) -> None:
        self._stats.files_processed += 1
        self._words_before_file += self._words_in_file
        self._words_in_file = 0
        self.current_file_size = 0

    def on_stream_open(self, chunk_path: str) -> None:
        self._stats.chunks_created += 1

    def on_stream_close(self, chunk_path: str) -> None:
        self._stats.chunks_closed += 1

    def on_progress(self, word_count: int) -> None:
        self._words_in_file = word_count
        self._stats.total_words = self._words_before_file + word_count

    def finish(self) -> ChunkingStats:
        self._end = monotonic()
        self._stats.finished_at = utc_now()
        return self.get_stats()

    def get_stats(self) -> ChunkingStats:
        """Return a copy with derived rates filled in."""
        self._derive()
        return self._stats.model_copy()

    def _derive(self) -> None:
        stats = self._stats
        if self._start is None:
            elapsed = 0.0
        else:
            end = self._end if self._end is not None else monotonic()
            elapsed = max(0.0, end - self._start)
        stats.processing_time_ms = elapsed * 1000

        stats.average_words_per_chunk = stats.total_words / stats.chunks_created if stats.chunks_created > 0 else 0.0
        stats.words_per_second = stats.total_words / elapsed if elapsed > 0 else 0.0
        stats.chunks_per_second = stats.chunks_created / elapsed if elapsed > 0 else 0.0
        stats.average_time_per_file = elapsed / stats.files_processed if stats.files_processed > 0 else 0.0
