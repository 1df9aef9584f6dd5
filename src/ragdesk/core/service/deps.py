"""Service wiring: build the RAG service from configuration.

Clients are constructed explicitly here and passed into the service;
nothing is created at import time.  Missing settings raise
``ConfigurationError`` before any request is handled.
"""

import logging

from ragdesk.configs.config import AppConfig
from ragdesk.core.llm.deps import get_llm_client
from ragdesk.core.retrieval.deps import get_retrieval_client

from .context import ContextExtractor
from .pipeline import RagService
from .prompt import PromptTemplates

logger = logging.getLogger(__name__)


def get_context_extractor(config: AppConfig) -> ContextExtractor:
    return ContextExtractor(
        question_field=config.rag.question_field,
        answer_field=config.rag.answer_field,
        separator=config.rag.separator,
    )


def get_prompt_templates(config: AppConfig) -> PromptTemplates:
    return PromptTemplates(
        condense_question_template=config.prompt.condense_question_template,
        answer_template=config.prompt.answer_template,
        organisation=config.prompt.organisation,
    )


def build_service(config: AppConfig) -> RagService:
    """Create the RAG service with all of its external clients."""
    prompts = get_prompt_templates(config)
    llm = get_llm_client(config.llm)
    retriever = get_retrieval_client(config.vector_store, config.embedding, config.rag)
    logger.info(
        "RAG service ready (collection=%r, top_k=%s)",
        config.vector_store.collection_name,
        config.rag.top_k if config.rag.top_k is not None else "default",
    )
    return RagService(
        llm,
        retriever,
        get_context_extractor(config),
        prompts,
        condense_fallback_to_question=config.rag.condense_fallback_to_question,
    )
