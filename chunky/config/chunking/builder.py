"""Fluent builder for ChunkOptions. Validation happens once, at build()."""

import re
from typing import Any, Callable

from chunky.config.chunking.models import ChunkOptions, StreamStats
from chunky.config.chunking.static import resolve_delimiter_profile


class ChunkOptionsBuilder:
    """
    Collect option values step by step, then validate them together.

    Unset values fall back to ChunkOptions defaults. Each setter returns the builder
    so calls can be chained in any order; later calls overwrite earlier ones.
    """

    def __init__(self) -> None:
        self._options: dict[str, Any] = {}

    def words_per_chunk(self, words: int) -> "ChunkOptionsBuilder":
        self._options["words_per_chunk"] = words
        return self

    def delimiter(self, delim: str | re.Pattern[str]) -> "ChunkOptionsBuilder":
        self._options["delimiter"] = delim
        return self

    def output_delimiter(self, delim: str) -> "ChunkOptionsBuilder":
        self._options["output_delimiter"] = delim
        return self

    def profile(self, name: str) -> "ChunkOptionsBuilder":
        """Set both delimiters from a named profile in static.json."""
        profile = resolve_delimiter_profile(name)
        self._options["delimiter"] = profile.delimiter
        self._options["output_delimiter"] = profile.output_delimiter
        return self

    def out_dir(self, directory: str) -> "ChunkOptionsBuilder":
        self._options["out_dir"] = directory
        return self

    def file_stem(self, stem: str) -> "ChunkOptionsBuilder":
        self._options["file_stem"] = stem
        return self

    def file_ext(self, ext: str) -> "ChunkOptionsBuilder":
        self._options["file_ext"] = ext
        return self

    def encoding(self, enc: str) -> "ChunkOptionsBuilder":
        self._options["encoding"] = enc
        return self

    def numbering(self, start: int, width: int) -> "ChunkOptionsBuilder":
        self._options["index_start"] = start
        self._options["index_width"] = width
        return self

    def on_stream_open(self, fn: Callable[[str], Any]) -> "ChunkOptionsBuilder":
        self._options["on_stream_open"] = fn
        return self

    def on_stream_close(self, fn: Callable[[str], Any]) -> "ChunkOptionsBuilder":
        self._options["on_stream_close"] = fn
        return self

    def on_progress(self, fn: Callable[[int], Any]) -> "ChunkOptionsBuilder":
        self._options["on_progress"] = fn
        return self

    def on_stats(self, fn: Callable[[StreamStats], Any]) -> "ChunkOptionsBuilder":
        self._options["on_stats"] = fn
        return self

    def build(self) -> ChunkOptions:
        """Validate collected values. Raises pydantic.ValidationError on bad input."""
        return ChunkOptions.model_validate(dict(self._options))
