"""Error kinds raised by the RAG pipeline.

Every stage failure aborts the pipeline; nothing here is recovered
locally.  ``code`` is a stable identifier for transports and logs.
"""


class RagDeskError(Exception):
    """Base class for all ragdesk errors."""

    code = "RAGDESK_ERROR"


class ConfigurationError(RagDeskError):
    """Missing or invalid external-service settings (fatal at startup)."""

    code = "CONFIGURATION_ERROR"


class GenerationFailure(RagDeskError):
    """The language model call failed or returned an unusable result."""

    code = "GENERATION_FAILURE"


class RetrievalFailure(RagDeskError):
    """The vector index was unreachable, the collection missing, or the search failed."""

    code = "RETRIEVAL_FAILURE"


class MalformedRequestError(RagDeskError):
    """The request carries no usable current message."""

    code = "MALFORMED_REQUEST"
