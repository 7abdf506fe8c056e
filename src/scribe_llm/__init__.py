"""Resilient client for OpenAI-compatible chat completions behind a writing assistant."""

from scribe_llm.client import CompletionClient
from scribe_llm.config import ConfigSnapshot, ProviderProfile, Settings, resolve_provider
from scribe_llm.errors import ApiError, ConfigurationError, ScribeLLMError, TransportError
from scribe_llm.prompts import build_system_prompt, parse_declared_mode, with_image_instructions
from scribe_llm.types import (
    ChatMessage,
    ConnectionResult,
    PromptContext,
    PromptMode,
    RequestOptions,
    StreamEvent,
    StreamResult,
)

__all__ = [
    "ApiError",
    "ChatMessage",
    "CompletionClient",
    "ConfigSnapshot",
    "ConfigurationError",
    "ConnectionResult",
    "PromptContext",
    "PromptMode",
    "ProviderProfile",
    "RequestOptions",
    "ScribeLLMError",
    "Settings",
    "StreamEvent",
    "StreamResult",
    "TransportError",
    "build_system_prompt",
    "parse_declared_mode",
    "resolve_provider",
    "with_image_instructions",
]
