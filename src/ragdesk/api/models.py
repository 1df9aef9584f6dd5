"""Pydantic models for the inbound chat request."""

from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ragdesk.core.errors import MalformedRequestError
from ragdesk.core.service.history import split_messages
from ragdesk.core.service.models import ChatMessage


class ChatRequest(BaseModel):
    """Full conversation as submitted by a client.

    The last message is the current question; all earlier messages are
    the chat history.
    """

    messages: list[ChatMessage] = Field(
        default_factory=list,
        description="Conversation so far, oldest first, current message last",
    )

    @classmethod
    def parse(cls, payload: Any) -> "ChatRequest":
        """Validate a decoded JSON body, raising ``MalformedRequestError``."""
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise MalformedRequestError(f"Invalid chat request: {exc}") from exc

    def split(self) -> tuple[str, list[ChatMessage]]:
        """Return ``(question, history)``."""
        return split_messages(self.messages)
