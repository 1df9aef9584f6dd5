"""Prometheus metrics for the RAG pipeline.

All metrics use the ``ragdesk_`` prefix.  Exposition (an HTTP endpoint
or a push gateway) belongs to whatever process hosts the pipeline.
"""

from prometheus_client import Counter, Histogram

# ---------------------------------------------------------------------------
# Pipeline metrics
# ---------------------------------------------------------------------------

PIPELINE_RUNS_TOTAL = Counter(
    "ragdesk_pipeline_runs_total",
    "Pipeline runs by outcome",
    ["status"],  # "ok" | error code
)

PIPELINE_STAGE_LATENCY_SECONDS = Histogram(
    "ragdesk_pipeline_stage_latency_seconds",
    "Latency of each external pipeline stage",
    ["stage"],  # condense | retrieve | generate
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)

CONDENSE_FALLBACKS_TOTAL = Counter(
    "ragdesk_condense_fallbacks_total",
    "Condensation failures answered with the raw question",
)

# ---------------------------------------------------------------------------
# Retrieval metrics
# ---------------------------------------------------------------------------

RAG_DOCUMENTS_RETURNED = Histogram(
    "ragdesk_rag_documents_returned",
    "Number of documents returned per retrieval",
    buckets=(0, 1, 2, 3, 4, 5, 10, 20),
)

RAG_RETRIEVAL_FAILURES_TOTAL = Counter(
    "ragdesk_rag_retrieval_failures_total",
    "Failed vector index searches",
)

# ---------------------------------------------------------------------------
# LLM metrics
# ---------------------------------------------------------------------------

LLM_CALLS_TOTAL = Counter(
    "ragdesk_llm_calls_total",
    "Language model calls by mode and outcome",
    ["mode", "status"],  # mode: complete | stream; status: ok | error
)

# ---------------------------------------------------------------------------
# Answer stream metrics
# ---------------------------------------------------------------------------

STREAM_CHUNKS_TOTAL = Counter(
    "ragdesk_stream_chunks_total",
    "Answer chunks delivered to the transport",
)

STREAM_OUTCOMES_TOTAL = Counter(
    "ragdesk_stream_outcomes_total",
    "Answer stream terminal outcomes",
    ["code"],  # ok | cancelled | GENERATION_FAILURE
)
