"""Chat history formatting for the condensation prompt."""

from collections.abc import Sequence

from ragdesk.core.errors import MalformedRequestError

from .models import ChatMessage


def format_message(message: ChatMessage) -> str:
    # One line per message: embedded line breaks are folded to spaces.
    content = " ".join(message.content.splitlines())
    return f"{message.role}: {content}"


def format_chat_history(history: Sequence[ChatMessage]) -> str:
    """Render prior turns as ``"<role>: <content>"`` lines in original order.

    Empty history renders as the empty string.
    """
    return "\n".join(format_message(message) for message in history)


def split_messages(
    messages: Sequence[ChatMessage],
) -> tuple[str, list[ChatMessage]]:
    """Split a full submitted conversation into ``(question, history)``.

    The last message is the current question; everything before it is
    history.  The current message never appears in the returned history.
    """
    if not messages:
        raise MalformedRequestError("Request contains no messages")

    *history, current = messages
    if not current.content.strip():
        raise MalformedRequestError("Current message is empty")
    return current.content, list(history)
