"""Domain models for the RAG pipeline.

Re-exports every public symbol so imports like
``from ragdesk.core.service.models import ChatMessage`` work.
"""

from .constants import *  # noqa: F401, F403
from .documents import *  # noqa: F401, F403
from .messages import *  # noqa: F401, F403
