from datetime import timedelta
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ragdesk.core.service.prompt import (
    ANSWER_TEMPLATE_DEFAULT,
    CONDENSE_QUESTION_TEMPLATE_DEFAULT,
    ORGANISATION_DEFAULT,
)


class LLMConfig(BaseModel):
    """Chat model used for both condensation and answering."""

    provider: Literal["azure", "openai"] = Field(
        default="azure",
        description="'azure' for Azure OpenAI deployments, 'openai' for any "
        "OpenAI-compatible endpoint",
    )
    endpoint: str = Field(
        default="",
        description="Azure endpoint or OpenAI-compatible base URL",
    )
    resource: str = Field(
        default="",
        description="Azure resource (instance) name, used when endpoint is empty",
    )
    api_key: str = Field(default="", description="API key for the model server")
    api_version: str = Field(
        default="2023-06-01-preview", description="Azure OpenAI API version"
    )
    deployment: str = Field(default="", description="Azure deployment name")
    model_name: str = Field(default="gpt-35-turbo", description="Model name")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_tokens: Optional[int] = Field(
        default=None, description="Maximum tokens in a single completion"
    )
    model_timeout: timedelta = Field(
        default=timedelta(seconds=60), description="Timeout for a single model call"
    )
    max_retries: int = Field(
        default=2, description="Retries performed by the OpenAI client itself"
    )

    @property
    def resolved_endpoint(self) -> str:
        if self.endpoint:
            return self.endpoint
        if self.resource:
            return f"https://{self.resource}.openai.azure.com/"
        return ""


class EmbeddingConfig(BaseModel):
    """Embedding model; must match the one used to populate the index."""

    provider: Literal["azure", "openai"] = Field(default="azure")
    endpoint: str = Field(default="")
    resource: str = Field(default="")
    api_key: str = Field(default="")
    api_version: str = Field(default="2023-06-01-preview")
    deployment: str = Field(default="", description="Azure deployment name")
    model_name: str = Field(default="text-embedding-ada-002")

    @property
    def resolved_endpoint(self) -> str:
        if self.endpoint:
            return self.endpoint
        if self.resource:
            return f"https://{self.resource}.openai.azure.com/"
        return ""


class VectorStoreConfig(BaseModel):
    """Qdrant connection settings."""

    url: str = Field(default="", description="Qdrant URL")
    api_key: str = Field(default="", description="Qdrant API key (token)")
    collection_name: str = Field(default="", description="Collection to search")
    content_payload_key: str = Field(
        default="content",
        description="Payload key holding the indexed text",
    )
    metadata_payload_key: str = Field(
        default="metadata", description="Payload key holding the document metadata"
    )


class RagConfig(BaseModel):
    """Retrieval and context-building settings."""

    top_k: Optional[int] = Field(
        default=None,
        ge=1,
        description="Documents retrieved per query; None keeps the index default",
    )
    separator: str = Field(
        default="\n\n", description="Separator between projected documents"
    )
    question_field: Optional[str] = Field(
        default=None,
        description="Metadata field holding the question text; None uses the "
        "document content",
    )
    answer_field: str = Field(
        default="answer", description="Metadata field holding the answer text"
    )
    condense_fallback_to_question: bool = Field(
        default=False,
        description="Use the raw question when condensation fails",
    )


class PromptConfig(BaseModel):
    """Prompt templates."""

    organisation: str = Field(
        default=ORGANISATION_DEFAULT,
        description="Who the assistant speaks for in the answer prompt",
    )
    condense_question_template: str = Field(
        default=CONDENSE_QUESTION_TEMPLATE_DEFAULT,
        description="Template with {chat_history} and {question}",
    )
    answer_template: str = Field(
        default=ANSWER_TEMPLATE_DEFAULT,
        description="Template with {organisation}, {context} and {question}",
    )


class LoggingConfig(BaseModel):
    """Logging output settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True, description="Emit JSON lines instead of human-readable logs"
    )


class TracingConfig(BaseModel):
    """OpenTelemetry tracing settings."""

    enabled: bool = Field(default=False)
    endpoint: str = Field(default="", description="OTLP/HTTP traces endpoint")
    username: str = Field(default="")
    password: str = Field(default="")
    service_name: str = Field(default="ragdesk")
    sample_rate: float = Field(default=1.0, ge=0.0, le=1.0)
