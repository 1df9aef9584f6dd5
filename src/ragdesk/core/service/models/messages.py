"""Chat messages exchanged with the pipeline."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single conversational turn. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant", "system"] = Field(
        description="Message sender role"
    )
    content: str = Field(description="Message content")
