"""Embeddings and vector store factory functions."""

import functools
import logging

from langchain_core.embeddings import Embeddings
from langchain_openai import AzureOpenAIEmbeddings, OpenAIEmbeddings
from langchain_qdrant import QdrantVectorStore

from ragdesk.configs.system import EmbeddingConfig, RagConfig, VectorStoreConfig
from ragdesk.core.errors import ConfigurationError

from .client import RetrievalClient

logger = logging.getLogger(__name__)


def _require(value: str, setting: str) -> str:
    if not value:
        raise ConfigurationError(f"Missing required setting: {setting}")
    return value


def get_embeddings(config: EmbeddingConfig) -> Embeddings:
    """Create the embedding model used to embed queries.

    Must be the same model the collection was indexed with; this is not
    verified.
    """
    api_key = _require(config.api_key, "embedding.api_key")

    if config.provider == "azure":
        return AzureOpenAIEmbeddings(
            azure_endpoint=_require(
                config.resolved_endpoint, "embedding.endpoint or embedding.resource"
            ),
            azure_deployment=_require(config.deployment, "embedding.deployment"),
            api_version=config.api_version,
            api_key=api_key,
        )

    return OpenAIEmbeddings(
        base_url=_require(config.endpoint, "embedding.endpoint"),
        api_key=api_key,
        model=config.model_name,
    )


def open_qdrant_store(
    config: VectorStoreConfig, embeddings: Embeddings
) -> QdrantVectorStore:
    """Attach to an existing Qdrant collection (fails if it is missing)."""
    logger.info(
        "Opening Qdrant collection %r at %s", config.collection_name, config.url
    )
    return QdrantVectorStore.from_existing_collection(
        embedding=embeddings,
        collection_name=config.collection_name,
        url=config.url,
        api_key=config.api_key or None,
        content_payload_key=config.content_payload_key,
        metadata_payload_key=config.metadata_payload_key,
    )


def get_retrieval_client(
    store_config: VectorStoreConfig,
    embedding_config: EmbeddingConfig,
    rag_config: RagConfig,
) -> RetrievalClient:
    """Build a retrieval client that connects to Qdrant on first use."""
    _require(store_config.url, "vector_store.url")
    _require(store_config.collection_name, "vector_store.collection_name")
    embeddings = get_embeddings(embedding_config)

    factory = functools.partial(
        open_qdrant_store, store_config, embeddings
    )
    return RetrievalClient(factory, top_k=rag_config.top_k)
