"""Documents returned by the retrieval stage."""

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RetrievedDocument(BaseModel):
    """A ranked search hit, read-only for the rest of the pipeline."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Indexed text of the document")
    metadata: dict[str, str] = Field(
        default_factory=dict,
        description="Stored payload fields, e.g. the associated answer",
    )
    score: float | None = Field(
        default=None, description="Similarity score reported by the index"
    )

    @field_validator("metadata", mode="before")
    @classmethod
    def _stringify_metadata(cls, value: Mapping[str, Any] | None) -> dict[str, str]:
        if value is None:
            return {}
        return {
            str(key): "" if item is None else str(item) for key, item in value.items()
        }
