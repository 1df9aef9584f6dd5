"""Tests for the retrieval client."""

import asyncio
import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.vectorstores import VectorStore

from ragdesk.core.errors import RetrievalFailure
from ragdesk.core.retrieval.client import RetrievalClient
from ragdesk.core.service.models import RetrievedDocument

ELECTIVES_QUESTION = "Which electives can Bachelor students take in the 3rd semester?"
ELECTIVES_ANSWER = (
    "Bachelor students in the 3rd semester can choose from the Management "
    "electives catalogue."
)


class TestSearch:
    @pytest.mark.asyncio
    async def test_most_similar_first(self, help_desk_store):
        client = RetrievalClient(help_desk_store)
        documents = await client.search(ELECTIVES_QUESTION)

        assert documents
        assert all(isinstance(d, RetrievedDocument) for d in documents)
        assert documents[0].content == ELECTIVES_QUESTION
        assert documents[0].metadata["answer"] == ELECTIVES_ANSWER
        scores = [d.score for d in documents]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_top_k_bounds_results(self, help_desk_store):
        client = RetrievalClient(help_desk_store, top_k=2)
        assert len(await client.search("exam")) == 2

    @pytest.mark.asyncio
    async def test_default_k_left_to_index(self):
        store = MagicMock(spec=VectorStore)
        store.asimilarity_search_with_score = AsyncMock(return_value=[])
        await RetrievalClient(store).search("q")
        store.asimilarity_search_with_score.assert_awaited_once_with("q")

    @pytest.mark.asyncio
    async def test_empty_index_returns_no_documents(self, empty_store):
        assert await RetrievalClient(empty_store).search("anything") == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_search_error_becomes_retrieval_failure(self, failing_store):
        client = RetrievalClient(failing_store)
        with pytest.raises(RetrievalFailure) as exc_info:
            await client.search("q")
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_missing_collection_becomes_retrieval_failure(self):
        def open_store():
            raise ValueError("Collection help_desk not found")

        client = RetrievalClient(open_store)
        with pytest.raises(RetrievalFailure, match="not found"):
            await client.search("q")

    @pytest.mark.asyncio
    async def test_factory_called_lazily_once(self, help_desk_store):
        factory = MagicMock(return_value=help_desk_store)
        client = RetrievalClient(factory)
        factory.assert_not_called()

        await client.search("q")
        await client.search("q")
        factory.assert_called_once_with()


class TestStoreOpening:
    @pytest.mark.asyncio
    async def test_slow_open_does_not_block_other_tasks(self, help_desk_store):
        def slow_open():
            time.sleep(0.3)
            return help_desk_store

        client = RetrievalClient(slow_open)
        gaps: list[float] = []

        async def ticker():
            loop = asyncio.get_running_loop()
            last = loop.time()
            while True:
                await asyncio.sleep(0.01)
                now = loop.time()
                gaps.append(now - last)
                last = now

        task = asyncio.create_task(ticker())
        try:
            await client.search(ELECTIVES_QUESTION)
        finally:
            task.cancel()

        assert gaps
        assert max(gaps) < 0.1

    @pytest.mark.asyncio
    async def test_concurrent_first_searches_open_once(self, help_desk_store):
        def open_store():
            time.sleep(0.05)
            return help_desk_store

        factory = MagicMock(side_effect=open_store)
        client = RetrievalClient(factory)

        first, second = await asyncio.gather(client.search("a"), client.search("b"))

        factory.assert_called_once_with()
        assert first and second

    @pytest.mark.asyncio
    async def test_ready_made_store_used_directly(self, help_desk_store):
        client = RetrievalClient(help_desk_store, top_k=1)
        [document] = await client.search(ELECTIVES_QUESTION)
        assert document.content == ELECTIVES_QUESTION
