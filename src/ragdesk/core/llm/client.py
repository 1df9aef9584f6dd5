"""LanguageModelClient -- "prompt in, text (or text stream) out".

Wraps any langchain ``BaseChatModel``.  Every failure of the underlying
model is re-raised as ``GenerationFailure`` with the original exception
chained, so the pipeline only ever sees its own error kinds.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from openai import APIConnectionError

from ragdesk.core.errors import GenerationFailure
from ragdesk.core.service.metrics import LLM_CALLS_TOTAL
from ragdesk.core.service.models import (
    LLM_MODE_COMPLETE,
    LLM_MODE_STREAM,
    OUTCOME_ERROR,
    OUTCOME_OK,
)

logger = logging.getLogger(__name__)


class LanguageModelClient:
    """Thin async facade over a chat model.

    Public API
    ----------
    ``complete(prompt)``
        Full, non-streamed text of the model's reply.

    ``stream(prompt)``
        Async iterator of non-empty text chunks as the model produces them.
    """

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm
        self._parser = StrOutputParser()

    @property
    def model_name(self) -> str:
        return (
            getattr(self._llm, "deployment_name", None)
            or getattr(self._llm, "model_name", None)
            or type(self._llm).__name__
        )

    def _failure(self, mode: str, exc: Exception) -> GenerationFailure:
        LLM_CALLS_TOTAL.labels(mode=mode, status=OUTCOME_ERROR).inc()
        if isinstance(exc, APIConnectionError):
            logger.warning("Model %s unreachable.", self.model_name)
            return GenerationFailure(f"Model {self.model_name} is unreachable")
        return GenerationFailure(f"Model call failed ({self.model_name}): {exc}")

    async def complete(self, prompt: str) -> str:
        try:
            message = await self._llm.ainvoke(prompt)
        except Exception as exc:
            raise self._failure(LLM_MODE_COMPLETE, exc) from exc
        LLM_CALLS_TOTAL.labels(mode=LLM_MODE_COMPLETE, status=OUTCOME_OK).inc()
        return self._parser.invoke(message)

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        """Yield text chunks; closing the iterator releases the model stream."""
        chunks = self._llm.astream(prompt)
        try:
            async for chunk in chunks:
                text = self._parser.invoke(chunk)
                if text:
                    yield text
        except Exception as exc:
            raise self._failure(LLM_MODE_STREAM, exc) from exc
        else:
            LLM_CALLS_TOTAL.labels(mode=LLM_MODE_STREAM, status=OUTCOME_OK).inc()
        finally:
            await chunks.aclose()
