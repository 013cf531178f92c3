"""Tests for option validation, the fluent builder and delimiter profiles."""

import re

import pytest
from pydantic import ValidationError

from chunky.config.chunking.builder import ChunkOptionsBuilder
from chunky.config.chunking.models import ChunkOptions
from chunky.config.chunking.static import (
    get_active_profile_name,
    load_delimiter_profiles,
    resolve_delimiter_profile,
)


def test_defaults() -> None:
    options = ChunkOptions()
    assert options.words_per_chunk == 1000
    assert options.delimiter.pattern == r"\s+"
    assert options.output_delimiter == " "
    assert options.out_dir == "./chunks"
    assert options.file_stem == "chunk"
    assert options.file_ext == ".txt"
    assert options.encoding == "utf-8"
    assert (options.index_start, options.index_width) == (1, 4)


@pytest.mark.parametrize(
    "field,value",
    [
        ("words_per_chunk", 0),
        ("words_per_chunk", -5),
        ("file_ext", "txt"),
        ("file_ext", ".t-x"),
        ("file_ext", "."),
        ("file_stem", ""),
        ("out_dir", ""),
        ("encoding", "no-such-codec"),
        ("delimiter", r"\s*"),
        ("delimiter", "(,)"),
        ("delimiter", r"\b"),
        ("delimiter", "(?=,)"),
        ("delimiter", ",*"),
        ("index_width", 0),
    ],
)
def test_invalid_values_rejected(field: str, value: object) -> None:
    with pytest.raises(ValidationError):
        ChunkOptions(**{field: value})


def test_unknown_option_rejected() -> None:
    with pytest.raises(ValidationError):
        ChunkOptions(words=10)


def test_string_delimiter_is_compiled() -> None:
    options = ChunkOptions(delimiter=r"[,;]")
    assert isinstance(options.delimiter, re.Pattern)
    assert options.delimiter.split("a,b;c") == ["a", "b", "c"]


def test_non_capturing_group_allowed() -> None:
    options = ChunkOptions(delimiter=r"(?:,|;)+")
    assert options.delimiter.groups == 0


def test_options_are_immutable() -> None:
    options = ChunkOptions()
    with pytest.raises(ValidationError):
        options.words_per_chunk = 5


def test_builder_fluent_interface() -> None:
    opened: list[str] = []
    options = (
        ChunkOptionsBuilder()
        .words_per_chunk(500)
        .delimiter(re.compile(","))
        .output_delimiter(";")
        .out_dir("/tmp/chunks")
        .file_stem("part")
        .file_ext(".csv")
        .encoding("latin-1")
        .numbering(0, 3)
        .on_stream_open(opened.append)
        .build()
    )

    assert options.words_per_chunk == 500
    assert options.delimiter.pattern == ","
    assert options.output_delimiter == ";"
    assert options.out_dir == "/tmp/chunks"
    assert options.file_stem == "part"
    assert options.file_ext == ".csv"
    assert options.encoding == "latin-1"
    assert (options.index_start, options.index_width) == (0, 3)
    assert options.on_stream_open is not None


def test_builder_defaults_and_repeat_builds() -> None:
    builder = ChunkOptionsBuilder().words_per_chunk(10)
    first = builder.build()
    second = builder.build()
    assert first == second
    assert first.file_stem == "chunk"


def test_builder_later_calls_win() -> None:
    options = ChunkOptionsBuilder().file_stem("a").words_per_chunk(3).file_stem("b").build()
    assert options.file_stem == "b"


def test_builder_validates_at_build_time() -> None:
    builder = ChunkOptionsBuilder().file_ext("txt")
    with pytest.raises(ValidationError):
        builder.build()


def test_builder_profile_sets_both_delimiters() -> None:
    options = ChunkOptionsBuilder().profile("tsv").build()
    assert options.delimiter.split("a\tb") == ["a", "b"]
    assert options.output_delimiter == "\t"


def test_builder_delimiter_overrides_profile() -> None:
    options = ChunkOptionsBuilder().profile("csv").delimiter(";").build()
    assert options.delimiter.pattern == ";"
    assert options.output_delimiter == ","


def test_active_profile_is_whitespace() -> None:
    assert get_active_profile_name() == "whitespace"
    profile = resolve_delimiter_profile("active")
    assert profile.delimiter == r"\s+"
    assert profile.output_delimiter == " "


def test_every_profile_builds_valid_options() -> None:
    profiles = load_delimiter_profiles()
    assert {"whitespace", "csv", "semicolon", "tsv", "pipe", "lines"} <= set(profiles)
    for name in profiles:
        ChunkOptionsBuilder().profile(name).build()


def test_unknown_profile() -> None:
    with pytest.raises(ValueError, match="Unknown delimiter profile"):
        resolve_delimiter_profile("yaml")


@pytest.mark.parametrize("pattern", [r"\b", "(?=,)", r"(?<=\w)", "$"])
def test_zero_width_delimiters_rejected(pattern: str) -> None:
    with pytest.raises(ValidationError, match="must not match the empty string"):
        ChunkOptions(delimiter=pattern)
