"""Tests for chat history formatting and request splitting."""

import pytest

from ragdesk.core.errors import MalformedRequestError
from ragdesk.core.service.history import format_chat_history, split_messages
from ragdesk.core.service.models import ChatMessage


def _msg(role: str, content: str) -> ChatMessage:
    return ChatMessage(role=role, content=content)


class TestFormatChatHistory:
    def test_empty_history_is_empty_string(self):
        assert format_chat_history([]) == ""

    def test_one_line_per_message_in_order(self):
        history = [
            _msg("user", "I'm a Bachelor's student"),
            _msg("assistant", "Which semester?"),
            _msg("system", "Be brief"),
        ]
        formatted = format_chat_history(history)

        assert formatted.split("\n") == [
            "user: I'm a Bachelor's student",
            "assistant: Which semester?",
            "system: Be brief",
        ]

    def test_multiline_content_stays_on_one_line(self):
        history = [_msg("user", "first line\nsecond line"), _msg("assistant", "ok")]
        lines = format_chat_history(history).split("\n")

        assert len(lines) == 2
        assert lines[0] == "user: first line second line"

    def test_does_not_reorder_or_drop(self):
        history = [_msg("user", f"turn {i}") for i in range(10)]
        lines = format_chat_history(history).split("\n")

        assert lines == [f"user: turn {i}" for i in range(10)]


class TestSplitMessages:
    def test_last_message_is_question(self):
        messages = [
            _msg("user", "I'm a Bachelor's student"),
            _msg("assistant", "Which semester?"),
            _msg("user", "3rd semester, what electives can I take?"),
        ]
        question, history = split_messages(messages)

        assert question == "3rd semester, what electives can I take?"
        assert history == messages[:2]

    def test_current_message_not_in_history(self):
        messages = [_msg("user", "What courses are available?")]
        question, history = split_messages(messages)

        assert question == "What courses are available?"
        assert history == []
        assert "What courses are available?" not in format_chat_history(history)

    def test_no_messages_is_malformed(self):
        with pytest.raises(MalformedRequestError):
            split_messages([])

    def test_blank_current_message_is_malformed(self):
        with pytest.raises(MalformedRequestError):
            split_messages([_msg("user", "hello"), _msg("user", "   ")])
