"""Tests for configuration reading and service wiring."""

import os
from unittest.mock import patch

import pytest
from langchain_openai import AzureChatOpenAI, ChatOpenAI

from ragdesk.configs.config import AppConfig, _PromptYamlSettingsSource, get_app_config
from ragdesk.configs.system import LLMConfig, RagConfig, VectorStoreConfig
from ragdesk.core.errors import ConfigurationError
from ragdesk.core.llm.deps import get_llm
from ragdesk.core.retrieval.deps import get_retrieval_client, open_qdrant_store
from ragdesk.core.service.deps import build_service, get_context_extractor


class TestConfigSimple:
    """Test basic configuration functionality."""

    def test_config_works(self):
        """Environment variables override the static YAML."""
        env_vars = {
            "RAGDESK_RAG__TOP_K": "4",
            "RAGDESK_RAG__QUESTION_FIELD": "answer",
            "RAGDESK_VECTOR_STORE__COLLECTION_NAME": "helpdesk",
            "RAGDESK_LLM__TEMPERATURE": "0.2",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            config = AppConfig()

            assert config.rag.top_k == 4
            assert config.rag.question_field == "answer"
            assert config.vector_store.collection_name == "helpdesk"
            assert config.llm.temperature == 0.2

    def test_static_defaults(self):
        config = get_app_config()

        assert config.llm.provider == "azure"
        assert config.rag.answer_field == "answer"
        assert config.rag.separator == "\n\n"
        assert "TUM Help Desk" in config.prompt.organisation

    def test_not_a_singleton(self):
        assert get_app_config() is not get_app_config()

    def test_top_k_must_be_positive(self):
        with pytest.raises(ValueError):
            RagConfig(top_k=0)

    def test_azure_endpoint_from_resource(self):
        config = LLMConfig(resource="my-openai")
        assert config.resolved_endpoint == "https://my-openai.openai.azure.com/"

        explicit = LLMConfig(resource="ignored", endpoint="https://proxy.example/")
        assert explicit.resolved_endpoint == "https://proxy.example/"


class TestPromptFile:
    def test_reads_prompt_keys(self, tmp_path):
        path = tmp_path / "prompt.yml"
        path.write_text("organisation: the Registrar's Office\nunrelated: 1\n")

        source = _PromptYamlSettingsSource(AppConfig, path=path)

        assert source() == {"prompt": {"organisation": "the Registrar's Office"}}

    def test_missing_file_contributes_nothing(self, tmp_path):
        source = _PromptYamlSettingsSource(AppConfig, path=tmp_path / "absent.yml")
        assert source() == {}

    def test_invalid_yaml_is_a_configuration_error(self, tmp_path):
        path = tmp_path / "prompt.yml"
        path.write_text("organisation: [unclosed\n")

        with pytest.raises(ConfigurationError):
            _PromptYamlSettingsSource(AppConfig, path=path)()


class TestServiceWiring:
    def test_azure_llm(self):
        llm = get_llm(
            LLMConfig(
                provider="azure",
                resource="my-openai",
                api_key="sk-test",
                deployment="gpt-35",
            )
        )
        assert isinstance(llm, AzureChatOpenAI)
        assert llm.temperature == 0.7

    def test_openai_compatible_llm(self):
        llm = get_llm(
            LLMConfig(
                provider="openai",
                endpoint="http://localhost:8080/v1",
                api_key="sk-test",
                model_name="qwen",
            )
        )
        assert isinstance(llm, ChatOpenAI)

    def test_missing_api_key(self):
        with pytest.raises(ConfigurationError, match="llm.api_key"):
            get_llm(LLMConfig(resource="my-openai", deployment="gpt-35"))

    def test_missing_deployment(self):
        with pytest.raises(ConfigurationError, match="llm.deployment"):
            get_llm(LLMConfig(resource="my-openai", api_key="sk-test"))

    def test_missing_vector_store_url(self):
        config = AppConfig()
        with pytest.raises(ConfigurationError, match="vector_store.url"):
            get_retrieval_client(
                VectorStoreConfig(collection_name="helpdesk"),
                config.embedding,
                config.rag,
            )

    def test_build_service_requires_credentials(self):
        config = AppConfig()
        config.llm = LLMConfig()

        with pytest.raises(ConfigurationError):
            build_service(config)

    def test_context_extractor_from_config(self):
        config = AppConfig()
        config.rag = RagConfig(question_field="answer", separator="\n---\n")

        extractor = get_context_extractor(config)

        assert extractor.question_field == "answer"
        assert extractor.separator == "\n---\n"

    def test_qdrant_payload_keys_passed_through(self):
        config = VectorStoreConfig(
            url="http://localhost:6333",
            collection_name="helpdesk",
            content_payload_key="text",
        )
        embeddings = object()

        with patch(
            "ragdesk.core.retrieval.deps.QdrantVectorStore.from_existing_collection"
        ) as from_existing:
            open_qdrant_store(config, embeddings)

        kwargs = from_existing.call_args.kwargs
        assert kwargs["content_payload_key"] == "text"
        assert kwargs["metadata_payload_key"] == "metadata"
        assert kwargs["collection_name"] == "helpdesk"
        assert kwargs["api_key"] is None

    def test_payload_keys_default_to_langchain_js_layout(self):
        config = get_app_config()
        assert config.vector_store.content_payload_key == "content"
        assert config.vector_store.metadata_payload_key == "metadata"
