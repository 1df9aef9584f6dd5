"""Vector index retrieval client and factories."""

from .client import RetrievalClient  # noqa: F401
from .deps import get_embeddings, get_retrieval_client  # noqa: F401
