"""Provider transports for scribe_llm."""

from .openai_compat import OpenAICompatProvider

__all__ = [
    "OpenAICompatProvider",
]
