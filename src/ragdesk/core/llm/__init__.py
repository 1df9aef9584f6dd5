"""Language model client and factories."""

from .client import LanguageModelClient  # noqa: F401
from .deps import get_llm, get_llm_client  # noqa: F401
