"""Chat model factory functions."""

import logging

from langchain_core.language_models import BaseChatModel
from langchain_openai import AzureChatOpenAI, ChatOpenAI

from ragdesk.configs.system import LLMConfig
from ragdesk.core.errors import ConfigurationError

from .client import LanguageModelClient

logger = logging.getLogger(__name__)


def _require(value: str, setting: str) -> str:
    if not value:
        raise ConfigurationError(f"Missing required setting: {setting}")
    return value


def get_llm(config: LLMConfig) -> BaseChatModel:
    """Create the chat model described by *config*.

    Raises ``ConfigurationError`` when credentials or endpoints are missing.
    """
    api_key = _require(config.api_key, "llm.api_key")

    if config.provider == "azure":
        endpoint = _require(config.resolved_endpoint, "llm.endpoint or llm.resource")
        deployment = _require(config.deployment, "llm.deployment")
        logger.info("Using Azure OpenAI deployment %r at %s", deployment, endpoint)
        return AzureChatOpenAI(
            azure_endpoint=endpoint,
            azure_deployment=deployment,
            api_version=config.api_version,
            api_key=api_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.model_timeout.total_seconds(),
            max_retries=config.max_retries,
        )

    endpoint = _require(config.endpoint, "llm.endpoint")
    logger.info("Using OpenAI-compatible model %r at %s", config.model_name, endpoint)
    return ChatOpenAI(
        base_url=endpoint,
        api_key=api_key,
        model=config.model_name,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.model_timeout.total_seconds(),
        max_retries=config.max_retries,
    )


def get_llm_client(config: LLMConfig) -> LanguageModelClient:
    return LanguageModelClient(get_llm(config))
