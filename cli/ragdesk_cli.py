"""Main CLI loop for interactive chat."""

import logging
import sys
from typing import TextIO

from ragdesk.configs.config import get_app_config
from ragdesk.core.errors import RagDeskError
from ragdesk.core.service.deps import build_service
from ragdesk.core.service.models import ROLE_ASSISTANT, ROLE_USER, ChatMessage
from ragdesk.core.service.pipeline import RagService
from ragdesk.infra.logging import setup_logging
from ragdesk.infra.telemetry import init_telemetry

from .formatter import ResponseFormatter

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit", "q")
RESET_COMMANDS = ("/reset", "/new")


class RagDeskCLI:
    """Interactive CLI that runs the RAG pipeline in-process.

    The conversation is kept here, client-side, and the full message
    list is submitted on every turn.
    """

    def __init__(
        self,
        service: RagService,
        input_stream: TextIO = sys.stdin,
        output_stream: TextIO = sys.stdout,
        show_question: bool = False,
    ):
        """Initialize the CLI.

        Parameters
        ----------
        service
            The RAG service answering each turn.
        input_stream
            Input stream for user input (default: stdin).
        output_stream
            Output stream for responses (default: stdout).
        show_question
            Whether to show the standalone question and retrieved sources.
        """
        self.service = service
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.show_question = show_question
        self.messages: list[ChatMessage] = []

    async def run(self) -> None:
        """Run the interactive CLI loop."""
        self._print_welcome()
        while True:
            try:
                query = self._get_user_input()
                if not query.strip():
                    continue

                command = query.strip().lower()
                if command in EXIT_COMMANDS:
                    self._print("Goodbye!\n")
                    break
                if command in RESET_COMMANDS:
                    self.messages.clear()
                    self._print("Started a new conversation.\n\n")
                    continue

                await self._process_query(query)

            except KeyboardInterrupt:
                self._print("\n\nInterrupted. Use 'exit' or 'quit' to exit.\n")
            except EOFError:
                self._print("\nGoodbye!\n")
                break

    async def _process_query(self, query: str) -> None:
        """Answer one user turn and record it in the conversation."""
        formatter = ResponseFormatter(self.output_stream, self.show_question)
        self.messages.append(ChatMessage(role=ROLE_USER, content=query))

        try:
            stream = await self.service.answer_messages(self.messages)
            formatter.handle_context(stream.standalone_question, stream.documents)
            async for chunk in stream:
                formatter.handle_chunk(chunk)
        except RagDeskError as e:
            logger.debug("Turn failed", exc_info=True)
            formatter.finish_response()
            formatter.handle_error(e.code, str(e))
            # Failed turns are not part of the conversation.
            self.messages.pop()
            self._print("\n")
            return

        answer = formatter.finish_response()
        self.messages.append(ChatMessage(role=ROLE_ASSISTANT, content=answer))
        self._print("\n")

    def _get_user_input(self) -> str:
        """Get user input from the input stream."""
        self._print("> ")
        line = self.input_stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n\r")

    def _print_welcome(self) -> None:
        """Print welcome message."""
        self._print("ragdesk CLI - Interactive Help Desk\n")
        self._print(
            "Type your question and press Enter. Type '/reset' to start over, "
            "'exit' or 'quit' to exit.\n\n"
        )

    def _print(self, text: str) -> None:
        """Print text to output stream."""
        self.output_stream.write(text)
        self.output_stream.flush()


async def main(debug: bool = False, show_question: bool = False) -> None:
    """Main entry point for the CLI.

    Parameters
    ----------
    debug
        Enable debug logging.
    show_question
        Show the standalone question and retrieved sources.
    """
    config = get_app_config()
    if debug:
        config.logging.level = "DEBUG"
        config.logging.json_output = False
    setup_logging(config.logging)
    init_telemetry(config.tracing)

    service = build_service(config)

    cli = RagDeskCLI(service, show_question=show_question)
    await cli.run()
