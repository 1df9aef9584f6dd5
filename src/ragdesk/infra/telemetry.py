"""OpenTelemetry bootstrap -- tracing initialisation and helpers.

Configures a ``TracerProvider`` with an OTLP HTTP exporter when tracing is
enabled via ``TracingConfig``.  When disabled the module is a graceful no-op
and ``tracer`` hands out non-recording spans.

The ``httpx`` instrumentation covers the outbound calls made by
``langchain-openai`` (model and embeddings) and ``qdrant-client``.

Usage::

    from ragdesk.infra.telemetry import SPAN_RAG_PIPELINE, tracer

    with tracer.start_as_current_span(SPAN_RAG_PIPELINE) as span:
        ...
"""

from __future__ import annotations

import base64
import logging

from opentelemetry import trace

from ragdesk.configs.system import TracingConfig

logger = logging.getLogger(__name__)

_otel_enabled = False

tracer = trace.get_tracer("ragdesk")

# ---------------------------------------------------------------------------
# Span names -- single source of truth for all custom spans
# ---------------------------------------------------------------------------

SPAN_RAG_PIPELINE = "rag.pipeline"
SPAN_RAG_CONDENSE = "rag.condense"
SPAN_RAG_RETRIEVE = "rag.retrieve"
SPAN_RAG_GENERATE = "rag.generate"
SPAN_ANSWER_STREAM = "answer.stream"

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_RAG_QUESTION_LEN = "rag.question_len"
ATTR_RAG_HISTORY_LEN = "rag.history_len"
ATTR_RAG_STANDALONE_LEN = "rag.standalone_len"
ATTR_RAG_TOP_K = "rag.top_k"
ATTR_RAG_RESULT_COUNT = "rag.result_count"
ATTR_RAG_CONTEXT_LEN = "rag.context_len"
ATTR_RAG_CONDENSE_FALLBACK = "rag.condense_fallback"

ATTR_STREAM_CHUNKS = "stream.chunks"
ATTR_STREAM_ERROR_CODE = "stream.error_code"


def init_telemetry(settings: TracingConfig | None = None) -> None:
    """Initialise the OTEL ``TracerProvider`` and httpx instrumentation.

    No-op when ``settings`` is ``None`` or tracing is disabled.
    """
    global _otel_enabled  # noqa: PLW0603

    if _otel_enabled:
        return

    if settings is None or not settings.enabled:
        logger.info("OpenTelemetry tracing disabled.")
        return

    if not settings.endpoint:
        logger.warning(
            "Tracing enabled but no endpoint configured; "
            "skipping OpenTelemetry setup."
        )
        return

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    resource = Resource.create({"service.name": settings.service_name})
    sampler = ParentBased(root=TraceIdRatioBased(settings.sample_rate))
    provider = TracerProvider(resource=resource, sampler=sampler)

    headers: dict[str, str] = {}
    if settings.username and settings.password:
        credentials = f"{settings.username}:{settings.password}"
        encoded = base64.b64encode(credentials.encode()).decode()
        headers["Authorization"] = f"Basic {encoded}"

    exporter = OTLPSpanExporter(endpoint=settings.endpoint, headers=headers)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    HTTPXClientInstrumentor().instrument()

    _otel_enabled = True
    logger.info(
        "OpenTelemetry tracing initialised (service=%s).", settings.service_name
    )

