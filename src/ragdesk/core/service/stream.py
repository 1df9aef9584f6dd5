"""AnswerStream -- the lazy, single-use sequence of answer chunks.

Ownership passes to the caller once the pipeline returns it; the caller
must either consume it or ``aclose()`` it, exactly once.  A failure of
the model mid-stream is recorded on ``error`` and re-raised to the
consumer as ``GenerationFailure``; chunks already yielded stand.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence

from ragdesk.core.errors import GenerationFailure

from .models import RetrievedDocument

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"


class AnswerStreamConsumed(RuntimeError):
    """An AnswerStream was iterated more than once."""


class AnswerStream:
    """Async iterator over the text chunks of one generated answer.

    ``first_chunk`` is a chunk already pulled from ``chunks`` by the
    pipeline (to surface pre-stream failures early); it is replayed
    before the remaining chunks.
    """

    def __init__(
        self,
        chunks: AsyncIterator[str],
        *,
        first_chunk: str | None = None,
        standalone_question: str = "",
        documents: Sequence[RetrievedDocument] = (),
    ) -> None:
        self._chunks = chunks
        self._first_chunk = first_chunk
        self._consumed = False
        self._closed = False
        self.standalone_question = standalone_question
        self.documents: tuple[RetrievedDocument, ...] = tuple(documents)
        self.error: GenerationFailure | None = None
        self.chunks_emitted = 0

    @property
    def consumed(self) -> bool:
        return self._consumed

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> AsyncIterator[str]:
        if self._consumed:
            raise AnswerStreamConsumed("AnswerStream can only be consumed once")
        self._consumed = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[str]:
        try:
            if self._first_chunk is not None:
                first, self._first_chunk = self._first_chunk, None
                self.chunks_emitted += 1
                yield first
            async for chunk in self._chunks:
                self.chunks_emitted += 1
                yield chunk
        except GenerationFailure as exc:
            self.error = exc
            logger.warning(
                "Answer stream failed after %d chunks", self.chunks_emitted,
                exc_info=True,
            )
            raise
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying model stream. Safe to call repeatedly.

        Closing an unconsumed stream abandons it; it cannot be iterated
        afterwards.
        """
        if self._closed:
            return
        self._closed = True
        self._consumed = True
        aclose = getattr(self._chunks, "aclose", None)
        if aclose is not None:
            await aclose()

    async def text(self) -> str:
        """Consume the stream and return the whole answer."""
        return "".join([chunk async for chunk in self])

    async def iter_bytes(self, encoding: str = DEFAULT_ENCODING) -> AsyncIterator[bytes]:
        """Consume the stream as encoded byte chunks."""
        async for chunk in self:
            yield chunk.encode(encoding)
