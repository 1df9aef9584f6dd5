"""Projection of retrieved documents into a single prompt context."""

from collections.abc import Sequence

from .models import RetrievedDocument

DEFAULT_SEPARATOR = "\n\n"
DEFAULT_ANSWER_FIELD = "answer"


class ContextExtractor:
    """Turns ranked documents into one context string, order preserved.

    Each document is projected as ``Question:<q>\\n\\nSample Answer:<a>``.
    ``answer_field`` names the metadata field carrying the stored answer.
    ``question_field`` names the field carrying the question text; when
    ``None`` the document's own indexed content is used instead.
    """

    def __init__(
        self,
        question_field: str | None = None,
        answer_field: str = DEFAULT_ANSWER_FIELD,
        separator: str = DEFAULT_SEPARATOR,
    ) -> None:
        self.question_field = question_field
        self.answer_field = answer_field
        self.separator = separator

    def project(self, document: RetrievedDocument) -> str:
        if self.question_field is None:
            question = document.content
        else:
            question = document.metadata.get(self.question_field, "")
        answer = document.metadata.get(self.answer_field, "")
        return f"Question:{question}\n\nSample Answer:{answer}"

    def extract(self, documents: Sequence[RetrievedDocument]) -> str:
        """Join projections with the separator; no documents gives ``""``."""
        return self.separator.join(self.project(doc) for doc in documents)
