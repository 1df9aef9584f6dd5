"""Byte-stream boundary between the answer stream and a transport.

Wraps an ``AnswerStream`` into plain encoded byte chunks with an error
boundary, cleanup, metrics and tracing.  No envelope and no trailer: a
mid-stream generation failure simply ends the byte stream after the
chunks already sent.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator

from ragdesk.core.errors import GenerationFailure
from ragdesk.core.service.metrics import STREAM_CHUNKS_TOTAL, STREAM_OUTCOMES_TOTAL
from ragdesk.core.service.models import OUTCOME_CANCELLED, OUTCOME_OK
from ragdesk.core.service.stream import DEFAULT_ENCODING, AnswerStream
from ragdesk.infra.telemetry import (
    ATTR_STREAM_CHUNKS,
    ATTR_STREAM_ERROR_CODE,
    SPAN_ANSWER_STREAM,
    tracer,
)

logger = logging.getLogger(__name__)


async def answer_bytes(
    stream: AnswerStream,
    *,
    encoding: str = DEFAULT_ENCODING,
) -> AsyncGenerator[bytes, None]:
    """Yield the answer as encoded bytes; always releases the model stream."""
    with tracer.start_as_current_span(SPAN_ANSWER_STREAM) as span:
        code = OUTCOME_OK
        try:
            async for chunk in stream.iter_bytes(encoding):
                STREAM_CHUNKS_TOTAL.inc()
                yield chunk

        except GenerationFailure as exc:
            code = exc.code
            span.record_exception(exc)
            logger.warning(
                "Answer stream ended early after %d chunks: %s",
                stream.chunks_emitted,
                exc,
            )
        except (asyncio.CancelledError, GeneratorExit):
            code = OUTCOME_CANCELLED
            logger.debug("Answer stream abandoned by the consumer.")
            raise
        finally:
            await stream.aclose()
            span.set_attribute(ATTR_STREAM_CHUNKS, stream.chunks_emitted)
            span.set_attribute(ATTR_STREAM_ERROR_CODE, code)
            STREAM_OUTCOMES_TOTAL.labels(code=code).inc()
