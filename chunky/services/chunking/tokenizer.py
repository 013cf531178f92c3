"""Streaming word tokenizer. Holds back the trailing piece until a later fragment or flush() proves it complete."""

import re
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

from chunky.config.chunking.models import DEFAULT_DELIMITER


class Tokenizer:
    """
    Split an arbitrarily fragmented text stream into words.

    The token sequence is the same however the input is cut into fragments: after
    each feed() the last split piece stays in the pending buffer, since the next
    fragment may extend it or complete a delimiter that straddles the cut.
    Empty pieces are dropped, so runs of delimiters collapse.
    """

    def __init__(self, delimiter: re.Pattern[str] = DEFAULT_DELIMITER) -> None:
        self._delimiter = delimiter
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received but not yet proven to end at a word boundary."""
        return self._buffer

    @property
    def pending_size(self) -> int:
        return len(self._buffer)

    def feed(self, fragment: str) -> list[str]:
        """
        Append a fragment and return every word it completed, in order.

        The held piece is split again together with the new fragment, because a regex
        delimiter match may begin anywhere inside it. A word arriving in k fragments is
        rescanned k times, so its cost grows quadratically; read in larger blocks when
        words can be very long.
        """
        if not fragment:
            return []
        pieces = self._delimiter.split(self._buffer + fragment)
        self._buffer = pieces.pop()
        return [piece for piece in pieces if piece]

    def flush(self) -> list[str]:
        """End of input: return the held piece as the final word, if any."""
        tail, self._buffer = self._buffer, ""
        return [tail] if tail else []


def iter_tokens(fragments: Iterable[str], delimiter: re.Pattern[str] = DEFAULT_DELIMITER) -> Iterator[str]:
    """Lazily tokenize a synchronous fragment source."""
    tokenizer = Tokenizer(delimiter)
    for fragment in fragments:
        yield from tokenizer.feed(fragment)
    yield from tokenizer.flush()


async def aiter_tokens(
    fragments: AsyncIterable[str], delimiter: re.Pattern[str] = DEFAULT_DELIMITER
) -> AsyncIterator[str]:
    """Lazily tokenize an async fragment source. Source errors propagate without a final flush."""
    tokenizer = Tokenizer(delimiter)
    async for fragment in fragments:
        for token in tokenizer.feed(fragment):
            yield token
    for token in tokenizer.flush():
        yield token
