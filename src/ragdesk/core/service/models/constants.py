"""Role, state and stage-name constants."""

# ---------------------------------------------------------------------------
# Chat roles -- import these instead of duplicating strings.
# ---------------------------------------------------------------------------

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

# ---------------------------------------------------------------------------
# Stage names (metric labels, span suffixes, log fields)
# ---------------------------------------------------------------------------

STAGE_CONDENSE = "condense"
STAGE_RETRIEVE = "retrieve"
STAGE_GENERATE = "generate"

# LLM call modes
LLM_MODE_COMPLETE = "complete"
LLM_MODE_STREAM = "stream"

# Outcome labels
OUTCOME_OK = "ok"
OUTCOME_ERROR = "error"
OUTCOME_CANCELLED = "cancelled"
