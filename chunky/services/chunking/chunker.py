"""
Chunking pipeline: fragment source → tokenizer → rotator.
One task drives the whole run; awaiting the rotator's writes is what pauses reading.
"""

import codecs
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from pathlib import Path

import aiofiles

from chunky.config.chunking.models import ChunkOptions, StreamStats
from chunky.config.logging import get_logger, log_extra
from chunky.config.settings import get_settings
from chunky.services.chunking.rotator import ChunkRotator
from chunky.services.chunking.tokenizer import Tokenizer

logger = get_logger(__name__)

Fragment = str | bytes
FragmentSource = AsyncIterable[Fragment] | Iterable[Fragment]


class ChunkPipeline:
    """
    Push fragments in with feed(), then call finish() exactly once.

    Byte fragments are decoded with an incremental decoder, so a multi-byte character
    split across two fragments still decodes correctly. run() wraps the whole
    sequence and aborts cleanly when the source fails.
    """

    def __init__(self, options: ChunkOptions | None = None) -> None:
        self.options = options or ChunkOptions()
        self._tokenizer = Tokenizer(self.options.delimiter)
        self._rotator = ChunkRotator(self.options)
        self._decoder = codecs.getincrementaldecoder(self.options.encoding)()

    async def feed(self, fragment: Fragment) -> None:
        if isinstance(fragment, (bytes, bytearray, memoryview)):
            data = bytes(fragment)
            nbytes = len(data)
            text = self._decoder.decode(data)
        else:
            nbytes = len(fragment.encode(self.options.encoding, errors="replace"))
            text = fragment
        tokens = self._tokenizer.feed(text)
        await self._rotator.record_input(nbytes, self._tokenizer.pending_size)
        for token in tokens:
            await self._rotator.on_token(token)

    async def finish(self) -> StreamStats:
        """End of input: flush the held word, close the last chunk, wait for every close."""
        tokens = self._tokenizer.feed(self._decoder.decode(b"", final=True))
        tokens.extend(self._tokenizer.flush())
        await self._rotator.record_input(0, 0)
        for token in tokens:
            await self._rotator.on_token(token)
        await self._rotator.on_end_of_input()
        return self.snapshot()

    async def abort(self) -> None:
        await self._rotator.abort()

    def snapshot(self) -> StreamStats:
        return self._rotator.snapshot()

    async def run(self, source: FragmentSource) -> StreamStats:
        """Consume a whole source. Any error aborts the run and is re-raised unchanged."""
        try:
            async for fragment in _aiterate(source):
                await self.feed(fragment)
            stats = await self.finish()
        except BaseException:
            await self.abort()
            raise
        logger.info(
            "Chunking run complete",
            **log_extra(
                {
                    "out_dir": self.options.out_dir,
                    "file_stem": self.options.file_stem,
                    "words": stats.words_processed,
                    "chunks": stats.chunks_created,
                    "bytes": stats.bytes_processed,
                }
            ),
        )
        return stats


async def _aiterate(source: FragmentSource) -> AsyncIterator[Fragment]:
    if isinstance(source, AsyncIterable):
        async for fragment in source:
            yield fragment
    else:
        for fragment in source:
            yield fragment


async def read_file_fragments(path: str | Path, read_size: int | None = None) -> AsyncIterator[bytes]:
    """Yield a file's content in binary blocks of at most read_size bytes."""
    size = read_size or get_settings().read_buffer_size
    async with aiofiles.open(path, "rb") as file:
        while True:
            block = await file.read(size)
            if not block:
                break
            yield block


async def chunk_stream(source: FragmentSource, options: ChunkOptions | None = None) -> StreamStats:
    """Chunk every fragment of `source` into files. Returns the final counters."""
    return await ChunkPipeline(options).run(source)


async def chunk_file(
    path: str | Path,
    options: ChunkOptions | None = None,
    read_size: int | None = None,
) -> StreamStats:
    """Chunk a file without loading it into memory."""
    return await chunk_stream(read_file_fragments(path, read_size), options)


async def chunk_text(text: str, options: ChunkOptions | None = None) -> StreamStats:
    """Chunk an in-memory string."""
    return await chunk_stream([text], options)
