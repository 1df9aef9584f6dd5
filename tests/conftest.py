"""Shared fixtures: fake models, fake vector stores and service builders."""

from collections.abc import AsyncIterator, Iterable
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.vectorstores import InMemoryVectorStore, VectorStore

from ragdesk.core.llm.client import LanguageModelClient
from ragdesk.core.retrieval.client import RetrievalClient
from ragdesk.core.service.pipeline import RagService

ELECTIVES_QUESTION = "Which electives can Bachelor students take in the 3rd semester?"
ELECTIVES_ANSWER = "Bachelor students in the 3rd semester can choose from the Management electives catalogue."


async def async_iter(items: Iterable[str]) -> AsyncIterator[str]:
    """Helper to create an async generator from a list."""
    for item in items:
        yield item


@pytest.fixture
def fake_llm():
    """Factory for a LanguageModelClient over langchain's FakeListChatModel.

    Responses are used in call order: the first for condensation, the
    second for the streamed answer.
    """

    def _make(*responses: str, error_on_chunk_number: int | None = None):
        model = FakeListChatModel(
            responses=list(responses),
            error_on_chunk_number=error_on_chunk_number,
        )
        return LanguageModelClient(model)

    return _make


@pytest.fixture
def mock_llm():
    """A LanguageModelClient double whose calls can be inspected."""

    def _make(standalone: str = "standalone question", answer_chunks=("An", "swer")):
        llm = MagicMock(spec=LanguageModelClient)
        llm.complete = AsyncMock(return_value=standalone)
        llm.stream = MagicMock(side_effect=lambda prompt: async_iter(answer_chunks))
        return llm

    return _make


@pytest.fixture
def embeddings():
    return DeterministicFakeEmbedding(size=16)


@pytest.fixture
def help_desk_store(embeddings):
    """In-memory index with a handful of help desk Q&A entries."""
    store = InMemoryVectorStore(embedding=embeddings)
    store.add_texts(
        [
            ELECTIVES_QUESTION,
            "How do I register for the final exam?",
            "Where can I find the module handbook?",
        ],
        metadatas=[
            {"answer": ELECTIVES_ANSWER},
            {"answer": "Register for exams via TUMonline during the registration period."},
            {"answer": "The module handbook is published on the School's website."},
        ],
    )
    return store


@pytest.fixture
def empty_store(embeddings):
    return InMemoryVectorStore(embedding=embeddings)


@pytest.fixture
def failing_store():
    """A vector store whose searches fail with a connectivity error."""
    store = MagicMock(spec=VectorStore)
    store.asimilarity_search_with_score = AsyncMock(
        side_effect=ConnectionError("Connection refused")
    )
    return store


@pytest.fixture
def make_service():
    def _make(llm, store, top_k=None, **kwargs):
        return RagService(llm, RetrievalClient(store, top_k=top_k), **kwargs)

    return _make
