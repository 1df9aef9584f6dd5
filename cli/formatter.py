"""Response formatter for streamed answers."""

from typing import Sequence, TextIO

from ragdesk.core.service.models import RetrievedDocument


class ResponseFormatter:
    """Writes one streamed answer to the terminal."""

    def __init__(self, output: TextIO, show_question: bool = False):
        """Initialize the formatter.

        Parameters
        ----------
        output
            File-like object to write output to.
        show_question
            Whether to display the standalone question and retrieved sources.
        """
        self.output = output
        self.show_question = show_question
        self.content_buffer: list[str] = []
        self.content_started = False

    def handle_context(
        self, standalone_question: str, documents: Sequence[RetrievedDocument]
    ) -> None:
        """Show what the answer is grounded on (only with ``show_question``)."""
        if not self.show_question:
            return
        self._print(f"\n🔎 Standalone question: {standalone_question}\n")
        self._print(f"📚 Retrieved {len(documents)} document(s)\n")
        for doc in documents:
            score = f" ({doc.score:.2f})" if doc.score is not None else ""
            self._print(f"   - {self._truncate(doc.content)}{score}\n")

    def handle_chunk(self, chunk: str) -> None:
        self.content_buffer.append(chunk)
        # Show "Response:" header before first content
        if not self.content_started:
            self._print("\nResponse:\n")
            self.content_started = True
        self.output.write(chunk)
        self.output.flush()

    def handle_error(self, code: str, message: str) -> None:
        self._print(f"\n❌ Error [{code}]: {message}\n")

    def finish_response(self) -> str:
        """Finish displaying a response and return its full text."""
        text = "".join(self.content_buffer)
        if self.content_buffer:
            self._print("\n")
            self.content_buffer.clear()
        self.content_started = False
        return text

    def _truncate(self, text: str, max_len: int = 80) -> str:
        text = " ".join(text.split())
        if len(text) > max_len:
            return f"{text[:max_len]}..."
        return text

    def _print(self, text: str) -> None:
        """Print text to output."""
        self.output.write(text)
        self.output.flush()
