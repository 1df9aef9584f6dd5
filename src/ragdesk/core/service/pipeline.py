"""Conversational RAG pipeline -- a small, fixed state machine.

Stages run strictly in order, each feeding the next::

    Idle → FormattingHistory → Condensing → Retrieving
         → ExtractingContext → Generating → Streaming → Done

Any failure moves straight to ``Failed`` and re-raises; there are no
retries and no earlier state is re-entered.  ``Done`` means the
``AnswerStream`` has been handed to the caller, not that it has been
consumed.

A ``RagPipeline`` serves exactly one request.  ``RagService`` holds the
shared, stateless clients and creates a fresh pipeline per request.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from enum import Enum

from ragdesk.core.errors import GenerationFailure, MalformedRequestError, RagDeskError
from ragdesk.core.llm.client import LanguageModelClient
from ragdesk.core.retrieval.client import RetrievalClient
from ragdesk.infra.telemetry import (
    ATTR_RAG_CONDENSE_FALLBACK,
    ATTR_RAG_CONTEXT_LEN,
    ATTR_RAG_HISTORY_LEN,
    ATTR_RAG_QUESTION_LEN,
    ATTR_RAG_RESULT_COUNT,
    ATTR_RAG_STANDALONE_LEN,
    ATTR_RAG_TOP_K,
    SPAN_RAG_CONDENSE,
    SPAN_RAG_GENERATE,
    SPAN_RAG_PIPELINE,
    SPAN_RAG_RETRIEVE,
    tracer,
)

from .context import ContextExtractor
from .history import format_chat_history, split_messages
from .metrics import (
    CONDENSE_FALLBACKS_TOTAL,
    PIPELINE_RUNS_TOTAL,
    PIPELINE_STAGE_LATENCY_SECONDS,
)
from .models import (
    OUTCOME_OK,
    STAGE_CONDENSE,
    STAGE_GENERATE,
    STAGE_RETRIEVE,
    ChatMessage,
    RetrievedDocument,
)
from .prompt import PromptTemplates
from .stream import AnswerStream

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_CODE = "UNEXPECTED_ERROR"


class PipelineState(str, Enum):
    IDLE = "idle"
    FORMATTING_HISTORY = "formatting_history"
    CONDENSING = "condensing"
    RETRIEVING = "retrieving"
    EXTRACTING_CONTEXT = "extracting_context"
    GENERATING = "generating"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


class RagPipeline:
    """One request's run through condense → retrieve → answer → stream."""

    def __init__(
        self,
        llm: LanguageModelClient,
        retriever: RetrievalClient,
        extractor: ContextExtractor,
        prompts: PromptTemplates,
        *,
        condense_fallback_to_question: bool = False,
    ) -> None:
        self._llm = llm
        self._retriever = retriever
        self._extractor = extractor
        self._prompts = prompts
        self._condense_fallback = condense_fallback_to_question
        self.state = PipelineState.IDLE
        self.transitions: list[PipelineState] = [PipelineState.IDLE]

    def _advance(self, state: PipelineState) -> None:
        logger.debug("RAG pipeline: %s -> %s", self.state.value, state.value)
        self.state = state
        self.transitions.append(state)

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    async def run(
        self, question: str, history: Sequence[ChatMessage]
    ) -> AnswerStream:
        """Run every stage and hand back the answer stream.

        Raises the first failing stage's error (``MalformedRequestError``,
        ``GenerationFailure`` or ``RetrievalFailure``).
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError("A RagPipeline can only be run once")

        with tracer.start_as_current_span(SPAN_RAG_PIPELINE) as span:
            span.set_attribute(ATTR_RAG_QUESTION_LEN, len(question or ""))
            span.set_attribute(ATTR_RAG_HISTORY_LEN, len(history))
            try:
                stream = await self._run(question, history)
            except Exception as exc:
                failed_in = self.state
                self._advance(PipelineState.FAILED)
                code = (
                    exc.code if isinstance(exc, RagDeskError) else UNEXPECTED_ERROR_CODE
                )
                PIPELINE_RUNS_TOTAL.labels(status=code).inc()
                logger.warning(
                    "RAG pipeline failed while %s: %s", failed_in.value, exc,
                    exc_info=not isinstance(exc, RagDeskError),
                )
                raise
            PIPELINE_RUNS_TOTAL.labels(status=OUTCOME_OK).inc()
            return stream

    async def _run(
        self, question: str, history: Sequence[ChatMessage]
    ) -> AnswerStream:
        if not question or not question.strip():
            raise MalformedRequestError("Question is empty")

        self._advance(PipelineState.FORMATTING_HISTORY)
        chat_history = format_chat_history(history)

        self._advance(PipelineState.CONDENSING)
        standalone = await self._condense(question, chat_history)

        self._advance(PipelineState.RETRIEVING)
        documents = await self._retrieve(standalone)

        self._advance(PipelineState.EXTRACTING_CONTEXT)
        context = self._extractor.extract(documents)

        self._advance(PipelineState.GENERATING)
        chunks, first_chunk = await self._generate(standalone, context)

        self._advance(PipelineState.STREAMING)
        stream = AnswerStream(
            chunks,
            first_chunk=first_chunk,
            standalone_question=standalone,
            documents=documents,
        )
        self._advance(PipelineState.DONE)
        return stream

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _condense(self, question: str, chat_history: str) -> str:
        with (
            tracer.start_as_current_span(SPAN_RAG_CONDENSE) as span,
            PIPELINE_STAGE_LATENCY_SECONDS.labels(stage=STAGE_CONDENSE).time(),
        ):
            prompt = self._prompts.render_condense_prompt(question, chat_history)
            try:
                standalone = (await self._llm.complete(prompt)).strip()
                if not standalone:
                    raise GenerationFailure("Condensation returned an empty question")
            except GenerationFailure:
                if not self._condense_fallback:
                    raise
                logger.warning(
                    "Condensation failed; using the raw question", exc_info=True
                )
                CONDENSE_FALLBACKS_TOTAL.inc()
                span.set_attribute(ATTR_RAG_CONDENSE_FALLBACK, True)
                standalone = question.strip()

            span.set_attribute(ATTR_RAG_STANDALONE_LEN, len(standalone))
            logger.debug("Standalone question: %s", standalone)
            return standalone

    async def _retrieve(self, standalone: str) -> list[RetrievedDocument]:
        with (
            tracer.start_as_current_span(SPAN_RAG_RETRIEVE) as span,
            PIPELINE_STAGE_LATENCY_SECONDS.labels(stage=STAGE_RETRIEVE).time(),
        ):
            if self._retriever.top_k is not None:
                span.set_attribute(ATTR_RAG_TOP_K, self._retriever.top_k)
            documents = await self._retriever.search(standalone)
            span.set_attribute(ATTR_RAG_RESULT_COUNT, len(documents))
            return documents

    async def _generate(
        self, standalone: str, context: str
    ) -> tuple[AsyncIterator[str], str]:
        """Start the answer stream and pull its first chunk.

        Pulling one chunk here makes a failure before any output a
        failure of ``run()`` rather than of the handed-off stream.
        """
        with (
            tracer.start_as_current_span(SPAN_RAG_GENERATE) as span,
            PIPELINE_STAGE_LATENCY_SECONDS.labels(stage=STAGE_GENERATE).time(),
        ):
            span.set_attribute(ATTR_RAG_CONTEXT_LEN, len(context))
            if not context:
                logger.info("RAG: no context retrieved; answering without grounding")
            prompt = self._prompts.render_answer_prompt(standalone, context)
            chunks = self._llm.stream(prompt)
            try:
                first_chunk = await anext(chunks)
            except StopAsyncIteration:
                raise GenerationFailure("Model returned an empty answer") from None
            return chunks, first_chunk


class RagService:
    """Shared entry point; creates an independent pipeline per request."""

    def __init__(
        self,
        llm: LanguageModelClient,
        retriever: RetrievalClient,
        extractor: ContextExtractor | None = None,
        prompts: PromptTemplates | None = None,
        *,
        condense_fallback_to_question: bool = False,
    ) -> None:
        self._llm = llm
        self._retriever = retriever
        self._extractor = extractor or ContextExtractor()
        self._prompts = prompts or PromptTemplates()
        self._condense_fallback = condense_fallback_to_question

    def new_pipeline(self) -> RagPipeline:
        return RagPipeline(
            self._llm,
            self._retriever,
            self._extractor,
            self._prompts,
            condense_fallback_to_question=self._condense_fallback,
        )

    async def answer(
        self, question: str, history: Sequence[ChatMessage]
    ) -> AnswerStream:
        return await self.new_pipeline().run(question, history)

    async def answer_messages(self, messages: Sequence[ChatMessage]) -> AnswerStream:
        """Answer the last message of a full conversation."""
        question, history = split_messages(messages)
        return await self.answer(question, history)
