"""Chunking configuration models. Read-only; no business logic."""

import codecs
import os
import re
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DELIMITER = re.compile(r"\s+")

# Text a delimiter is tried against; any zero-width match disqualifies it
DELIMITER_SAMPLES = ("", "a b,c", "word\tword\r\nword;x|y", ",,  ")


class StreamStats(BaseModel):
    """Snapshot of a run's running counters."""

    model_config = ConfigDict(frozen=True)

    bytes_processed: int = Field(default=0, ge=0, description="Raw input bytes consumed")
    current_memory_usage: int = Field(default=0, ge=0, description="Estimated bytes held in buffers right now")
    high_water_mark: int = Field(default=0, ge=0, description="Peak estimated bytes held in buffers")
    chunks_created: int = Field(default=0, ge=0, description="Chunk files opened so far")
    words_processed: int = Field(default=0, ge=0, description="Tokens written so far")


class ChunkOptions(BaseModel):
    """Options for one chunking run. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    words_per_chunk: int = Field(default=1000, gt=0, description="Words written to each chunk before rotating")
    delimiter: re.Pattern[str] = Field(default=DEFAULT_DELIMITER, description="Input word delimiter pattern")
    output_delimiter: str = Field(default=" ", description="Separator written between words of a chunk")
    out_dir: str = Field(default="./chunks", min_length=1, description="Directory receiving chunk files")
    file_stem: str = Field(default="chunk", min_length=1, description="Chunk file name stem")
    file_ext: str = Field(default=".txt", pattern=r"^\.[A-Za-z0-9]+$", description="Chunk file extension")
    encoding: str = Field(default="utf-8", description="Codec for decoding byte input and writing chunks")
    index_start: int = Field(default=1, ge=0, description="Index of the first chunk file")
    index_width: int = Field(default=4, ge=1, le=20, description="Zero-padding width of chunk indices")
    line_terminator: str = Field(default=os.linesep, description="Written once at the end of every chunk")
    write_buffer_size: int = Field(default=64 * 1024, ge=1, description="Buffered characters before awaiting a write")
    max_pending_closes: int = Field(default=4, ge=1, le=256, description="Chunk closes allowed in flight")
    stats_interval: float = Field(default=0.1, ge=0, description="Minimum seconds between on_stats calls")

    on_stream_open: Callable[[str], Any] | None = None
    on_stream_close: Callable[[str], Any] | None = None
    on_progress: Callable[[int], Any] | None = None
    on_stats: Callable[[StreamStats], Any] | None = None

    @field_validator("delimiter")
    @classmethod
    def _check_delimiter(cls, value: re.Pattern[str]) -> re.Pattern[str]:
        if not isinstance(value.pattern, str):
            raise ValueError("delimiter must be a text pattern")
        if value.groups:
            raise ValueError("delimiter must not contain capturing groups")
        for sample in DELIMITER_SAMPLES:
            if any(m.start() == m.end() for m in value.finditer(sample)):
                raise ValueError("delimiter must not match the empty string")
        return value

    @field_validator("encoding")
    @classmethod
    def _check_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {value!r}") from e
        return value


class DelimiterProfile(BaseModel):
    """Named pairing of an input delimiter pattern with the separator written to chunks."""

    delimiter: str = Field(..., min_length=1, description="Regular expression splitting input words")
    output_delimiter: str = Field(default=" ", description="Separator written between words")
    description: str = Field(default="")
