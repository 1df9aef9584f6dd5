"""RetrievalClient -- "query string in, ranked documents out".

Wraps a langchain ``VectorStore`` (Qdrant in production).  The store
may be passed ready-made or as a zero-argument factory; a factory is
only called on the first search, so an unreachable index or a missing
collection surfaces as ``RetrievalFailure`` inside a request rather
than at import time.

Opening the store is blocking I/O, so the factory runs in a worker
thread; concurrent first searches share a single open.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from langchain_core.vectorstores import VectorStore

from ragdesk.core.errors import RetrievalFailure
from ragdesk.core.service.metrics import (
    RAG_DOCUMENTS_RETURNED,
    RAG_RETRIEVAL_FAILURES_TOTAL,
)
from ragdesk.core.service.models import RetrievedDocument

logger = logging.getLogger(__name__)

VectorStoreFactory = Callable[[], VectorStore]


class RetrievalClient:
    """Similarity search against a single named collection."""

    def __init__(
        self,
        vector_store: VectorStore | VectorStoreFactory,
        top_k: int | None = None,
    ) -> None:
        self._store: VectorStore | None = None
        if isinstance(vector_store, VectorStore):
            self._store = vector_store
            self._factory: VectorStoreFactory = lambda: vector_store
        else:
            self._factory = vector_store
        self._open_lock = asyncio.Lock()
        self.top_k = top_k

    async def _get_store(self) -> VectorStore:
        if self._store is not None:
            return self._store
        async with self._open_lock:
            if self._store is None:
                try:
                    self._store = await asyncio.to_thread(self._factory)
                except Exception as exc:
                    RAG_RETRIEVAL_FAILURES_TOTAL.inc()
                    raise RetrievalFailure(
                        f"Could not open vector index: {exc}"
                    ) from exc
                logger.info("Vector index opened.")
            return self._store

    async def search(self, query: str) -> list[RetrievedDocument]:
        """Return documents most similar to *query*, most relevant first."""
        store = await self._get_store()
        kwargs = {} if self.top_k is None else {"k": self.top_k}
        try:
            hits = await store.asimilarity_search_with_score(query, **kwargs)
        except Exception as exc:
            RAG_RETRIEVAL_FAILURES_TOTAL.inc()
            raise RetrievalFailure(f"Vector index search failed: {exc}") from exc

        documents = [
            RetrievedDocument(
                content=doc.page_content,
                metadata=doc.metadata,
                score=float(score),
            )
            for doc, score in hits
        ]
        RAG_DOCUMENTS_RETURNED.observe(len(documents))
        logger.info(
            "RAG: retrieved %d documents (top_k=%s)",
            len(documents),
            self.top_k if self.top_k is not None else "default",
        )
        return documents
