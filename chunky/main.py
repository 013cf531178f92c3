"""CLI entry: settings, logging, per-file chunking and the closing stats report."""

import asyncio
import re
import sys
from collections import Counter
from pathlib import Path

import click
from pydantic import ValidationError

from chunky.config.chunking.builder import ChunkOptionsBuilder
from chunky.config.chunking.models import ChunkOptions, StreamStats
from chunky.config.logging import LOG_LEVELS, configure_logging, get_logger
from chunky.config.settings import get_settings
from chunky.services.chunking.chunker import chunk_file
from chunky.services.chunking.errors import ChunkingError, FileStatsError, OutputDirectoryError
from chunky.services.stats.tracker import StatsTracker

logger = get_logger(__name__)

RULE = "━" * 50


def format_bytes(size: int) -> str:
    """Human readable size, e.g. 1536 -> '1.5 KB'."""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


def build_options(
    words: int | None,
    out_dir: str | None,
    stem: str | None,
    ext: str | None,
    delimiter: str | None,
    output_delimiter: str | None,
    profile: str | None,
    encoding: str | None,
) -> ChunkOptions:
    """Merge command-line values over CHUNKY_* settings. Raises ValidationError or ValueError."""
    settings = get_settings()
    builder = (
        ChunkOptionsBuilder()
        .profile(profile or settings.delimiter_profile)
        .words_per_chunk(words if words is not None else settings.words_per_chunk)
        .out_dir(out_dir or settings.out_dir)
        .file_stem(stem or settings.file_stem)
        .file_ext(ext or settings.file_ext)
        .encoding(encoding or settings.encoding)
    )
    if delimiter is not None:
        try:
            builder.delimiter(re.compile(delimiter))
        except re.error as e:
            raise ValueError(f"Invalid delimiter pattern {delimiter!r}: {e}") from e
    if output_delimiter is not None:
        builder.output_delimiter(output_delimiter)
    options = builder.build()
    return options.model_copy(
        update={
            "write_buffer_size": settings.write_buffer_size,
            "max_pending_closes": settings.max_pending_closes,
        }
    )


async def process_file(path: Path, base_options: ChunkOptions, tracker: StatsTracker) -> StreamStats:
    """Chunk one file, feeding the tracker and a byte-based progress bar."""
    name = path.name
    try:
        await tracker.track_file(path)
    except FileStatsError as e:
        click.secho(f"Could not get file stats for {name}: {e.cause or 'unknown error'}", fg="yellow", err=True)

    shown = 0
    with click.progressbar(length=max(tracker.current_file_size, 1), label=f"Chunking {name}", file=sys.stderr) as bar:

        def on_stats(stats: StreamStats) -> None:
            nonlocal shown
            bar.update(stats.bytes_processed - shown)
            shown = stats.bytes_processed

        options = base_options.model_copy(
            update={
                "on_stream_open": tracker.on_stream_open,
                "on_stream_close": tracker.on_stream_close,
                "on_progress": tracker.on_progress,
                "on_stats": on_stats,
            }
        )
        stats = await chunk_file(path, options, read_size=get_settings().read_buffer_size)

    tracker.complete_file()
    click.echo(
        f"{click.style('✓', fg='green')} Processed {click.style(name, fg='yellow')}: "
        f"{stats.words_processed:,} words in {stats.chunks_created} chunks"
    )
    return stats


async def process_files(files: list[Path], options: ChunkOptions, tracker: StatsTracker) -> None:
    """Chunk files one after another. With several inputs each gets its own stem so names never collide."""
    stems = file_stems(files, options.file_stem)
    for path, stem in zip(files, stems):
        await process_file(path, options.model_copy(update={"file_stem": stem}), tracker)


def file_stems(files: list[Path], stem: str) -> list[str]:
    """
    Chunk stem per input. A single input keeps `stem`; several get `{stem}_{name}`.
    When two inputs would share a stem, every input gets its 1-based position as well:
    `{stem}_{position}_{name}`.
    """
    if len(files) == 1:
        return [stem]
    stems = [f"{stem}_{path.stem}" for path in files]
    if max(Counter(stems).values()) > 1:
        stems = [f"{stem}_{i}_{path.stem}" for i, path in enumerate(files, start=1)]
    return stems


def display_stats(tracker: StatsTracker) -> None:
    stats = tracker.finish()
    seconds = stats.processing_time_ms / 1000

    click.echo()
    click.secho("CHUNKING STATS", fg="cyan", bold=True)
    click.secho(RULE, fg="bright_black")
    click.echo(f"{click.style('Files Processed:', bold=True)} {click.style(str(stats.files_processed), fg='yellow')}")
    click.echo(f"{click.style('Total File Size:', bold=True)} {click.style(format_bytes(stats.total_file_size), fg='yellow')}")
    click.echo(f"{click.style('Total Words:', bold=True)} {click.style(f'{stats.total_words:,}', fg='yellow')}")
    click.echo(f"{click.style('Chunks Created:', bold=True)} {click.style(str(stats.chunks_created), fg='yellow')}")
    if stats.chunks_closed != stats.chunks_created:
        click.secho(f"Warning: only {stats.chunks_closed} of {stats.chunks_created} chunks were closed", fg="yellow")
    click.echo(
        f"{click.style('Avg Words/Chunk:', bold=True)} "
        f"{click.style(f'{round(stats.average_words_per_chunk):,}', fg='yellow')}"
    )
    click.secho(RULE, fg="bright_black")
    click.echo(f"{click.style('Processing Time:', bold=True)} {click.style(f'{seconds:.2f}', fg='green')}s")
    click.echo(f"{click.style('Words/Second:', bold=True)} {click.style(f'{round(stats.words_per_second):,}', fg='green')}")
    click.echo(f"{click.style('Chunks/Second:', bold=True)} {click.style(f'{stats.chunks_per_second:.2f}', fg='green')}")
    if stats.files_processed > 1:
        click.echo(
            f"{click.style('Avg Time/File:', bold=True)} {click.style(f'{stats.average_time_per_file:.2f}', fg='green')}s"
        )
    click.secho(RULE, fg="bright_black")
    click.secho("Chunking complete!", fg="green", bold=True)


@click.command(name="chunky")
@click.version_option(package_name="chunky")
@click.argument("files", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path))
@click.option("-w", "--words", type=int, default=None, help="Words per chunk [default: 1000]")
@click.option("-o", "--out-dir", default=None, help="Output directory [default: ./chunks]")
@click.option("-s", "--stem", default=None, help="File stem for chunks [default: chunk]")
@click.option("-e", "--ext", default=None, help="File extension for chunks [default: .txt]")
@click.option("-d", "--delimiter", default=None, help="Word delimiter regex (overrides the profile)")
@click.option("--output-delimiter", default=None, help="Separator written between words (overrides the profile)")
@click.option("-p", "--profile", default=None, help="Delimiter profile: whitespace, csv, semicolon, tsv, pipe, lines")
@click.option("--encoding", default=None, help="Input and output text encoding [default: utf-8]")
@click.option(
    "--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None, help="Log level [default: WARNING]"
)
def cli(
    files: tuple[Path, ...],
    words: int | None,
    out_dir: str | None,
    stem: str | None,
    ext: str | None,
    delimiter: str | None,
    output_delimiter: str | None,
    profile: str | None,
    encoding: str | None,
    log_level: str | None,
) -> None:
    """Split text files into chunk files of a fixed number of words."""
    configure_logging(log_level)

    for path in files:
        if not path.exists():
            click.secho(f'Error: File "{path}" does not exist', fg="red", err=True)
            sys.exit(1)

    try:
        options = build_options(words, out_dir, stem, ext, delimiter, output_delimiter, profile, encoding)
    except (ValidationError, ValueError) as e:
        click.secho(f"Invalid options: {e}", fg="red", err=True)
        sys.exit(1)

    click.secho(f"Processing {len(files)} file(s)...", bold=True)
    click.secho(f"Output: {options.out_dir}", fg="bright_black")
    click.secho(f"Words per chunk: {options.words_per_chunk}", fg="bright_black")

    tracker = StatsTracker()
    tracker.start()
    try:
        asyncio.run(process_files(list(files), options, tracker))
    except OutputDirectoryError as e:
        click.secho(f"Cannot create output directory {e.output_path}: {e.cause or 'unknown error'}", fg="red", err=True)
        sys.exit(1)
    except (ChunkingError, OSError, UnicodeDecodeError) as e:
        logger.debug("Chunking failed", exc_info=True)
        click.secho(f"Error during processing: {e}", fg="red", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.secho("Process interrupted by user", fg="yellow", err=True)
        display_stats(tracker)
        sys.exit(0)

    display_stats(tracker)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
