"""Stream text into fixed word-count chunk files."""

from chunky.config.chunking.builder import ChunkOptionsBuilder
from chunky.config.chunking.models import ChunkOptions, StreamStats
from chunky.services.chunking.chunker import ChunkPipeline, chunk_file, chunk_stream, chunk_text
from chunky.services.chunking.errors import (
    ChunkingError,
    FileStatsError,
    OutputDirectoryError,
    OutputStreamError,
)
from chunky.services.chunking.rotator import ChunkRotator, ChunkState
from chunky.services.chunking.tokenizer import Tokenizer, aiter_tokens, iter_tokens
from chunky.services.stats.tracker import ChunkingStats, StatsTracker

__version__ = "0.1.0"

__all__ = [
    "ChunkOptions",
    "ChunkOptionsBuilder",
    "ChunkPipeline",
    "ChunkRotator",
    "ChunkState",
    "ChunkingError",
    "ChunkingStats",
    "FileStatsError",
    "OutputDirectoryError",
    "OutputStreamError",
    "StatsTracker",
    "StreamStats",
    "Tokenizer",
    "aiter_tokens",
    "chunk_file",
    "chunk_stream",
    "chunk_text",
    "iter_tokens",
]
