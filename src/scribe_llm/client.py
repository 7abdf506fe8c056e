"""Async client orchestrating provider resolution, payloads and streaming state."""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping, Sequence
from contextlib import aclosing
from typing import Any

import httpx

from scribe_llm.config import ConfigSnapshot, ProviderProfile, Settings
from scribe_llm.errors import ApiError, ConfigurationError, ScribeLLMError, TransportError
from scribe_llm.prompts import build_system_prompt
from scribe_llm.providers.openai_compat import OpenAICompatProvider
from scribe_llm.streaming import CancellationToken
from scribe_llm.types import (
    ChatMessage,
    ConnectionResult,
    PromptContext,
    PromptMode,
    RequestOptions,
    StreamEvent,
    StreamResult,
)

_logger = logging.getLogger(__name__)

_NOT_CONFIGURED = "API key not configured. Please add your API key in Settings."
_ALIVE_TEMPERATURE = 0.7
_PROBE_MAX_TOKENS = 10

MessageLike = ChatMessage | Mapping[str, Any]
ChunkCallback = Callable[[str, str, str, str], Awaitable[None] | None]


class CompletionClient:
    """Chat-completion client with a primary and a secondary ("alive") provider.

    Only one stream's cancellation state is tracked at a time. Starting a second
    stream replaces the token of the first without cancelling it, so callers that
    need exclusivity must serialize streaming calls themselves.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        timeout_s: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings if settings is not None else Settings()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_s, transport=transport)
        self._config = self._settings.snapshot()
        self._is_streaming = False
        self._cancel_token: CancellationToken | None = None

    async def __aenter__(self) -> CompletionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    # -- configuration -----------------------------------------------------

    @property
    def config(self) -> ConfigSnapshot:
        return self._config

    def refresh_config(self) -> None:
        """Re-read both provider profiles from the settings object."""
        self._config = self._settings.snapshot()

    def resolve_provider(self, use_secondary: bool = False) -> ProviderProfile:
        return self._config.resolve(use_secondary)

    def is_configured(self, use_secondary: bool = False) -> bool:
        return self.resolve_provider(use_secondary).is_configured

    @property
    def is_streaming(self) -> bool:
        return self._is_streaming

    # -- payloads ----------------------------------------------------------

    @staticmethod
    def build_system_prompt(mode: PromptMode | str | None, context: PromptContext | None = None) -> str:
        return build_system_prompt(mode, context)

    def build_payload(
        self,
        messages: Sequence[MessageLike],
        options: RequestOptions | None = None,
        *,
        profile: ProviderProfile | None = None,
        stream: bool = False,
    ) -> dict[str, Any]:
        """Assemble the request body; the caller's message list is copied, never modified."""
        options = options or RequestOptions()
        profile = profile or self._config.primary

        wire_messages = [_serialize_message(m) for m in messages]
        if options.system_prompt:
            wire_messages.insert(0, {"role": "system", "content": options.system_prompt})
        elif options.mode:
            wire_messages.insert(
                0,
                {"role": "system", "content": build_system_prompt(options.mode, options.context)},
            )

        payload: dict[str, Any] = {
            "model": options.model or profile.model,
            "messages": wire_messages,
            "temperature": options.temperature,
            "max_tokens": options.max_output_tokens,
            "stream": stream,
        }
        payload.update(options.extra_fields)
        return payload

    # -- operations --------------------------------------------------------

    async def test_connection(self) -> ConnectionResult:
        """Probe the primary provider. Failures come back as a result, never raised."""
        profile = self._config.primary
        if not profile.is_configured:
            return ConnectionResult(success=False, error="API key not configured")

        payload = {
            "model": profile.model,
            "messages": [{"role": "user", "content": "Hello"}],
            "max_tokens": _PROBE_MAX_TOKENS,
        }
        try:
            await OpenAICompatProvider(profile, self._http).chat(payload)
        except ApiError as exc:
            return ConnectionResult(success=False, error=str(exc))
        except TransportError as exc:
            return ConnectionResult(success=False, error=f"Connection failed: {exc}")
        except ScribeLLMError as exc:
            return ConnectionResult(success=False, error=str(exc))
        return ConnectionResult(success=True, model=profile.model)

    async def send_message(
        self,
        messages: Sequence[MessageLike],
        options: RequestOptions | None = None,
    ) -> str:
        """Send a buffered completion request and return the first choice's text."""
        profile = self._require_configured(self._config.primary)
        payload = self.build_payload(messages, options, profile=profile)
        data = await OpenAICompatProvider(profile, self._http).chat(payload)
        return _first_choice_content(data)

    async def send_alive_request(self, prompt: str, system_prompt: str | None = None) -> str:
        """Lightweight one-shot call on the secondary provider.

        Resolved independently of the primary profile: blank secondary fields fall
        back to primary ones, but nothing here depends on the primary being usable
        as a whole.
        """
        profile = self._config.resolve(use_secondary=True)
        if not profile.is_configured:
            raise ConfigurationError("Alive editor API key not configured. Please add it in Settings.")
        if not profile.model.strip():
            raise ConfigurationError("Alive editor model not configured. Please add it in Settings.")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": profile.model,
            "messages": messages,
            "temperature": _ALIVE_TEMPERATURE,
            "stream": False,
        }
        data = await OpenAICompatProvider(profile, self._http).chat(payload)
        return _first_choice_content(data).strip()

    def stream(
        self,
        messages: Sequence[MessageLike],
        options: RequestOptions | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Stream content/thinking increments from the primary provider.

        Configuration is checked eagerly; streaming state is entered when
        iteration starts and released when it ends, fails or is cancelled.
        """
        profile = self._require_configured(self._config.primary)
        payload = self.build_payload(messages, options, profile=profile, stream=True)
        provider = OpenAICompatProvider(profile, self._http)

        async def _gen() -> AsyncIterator[StreamEvent]:
            token = CancellationToken()
            self._cancel_token = token
            self._is_streaming = True
            try:
                async with aclosing(provider.stream(payload, token)) as events:
                    async for event in events:
                        yield event
            finally:
                if self._cancel_token is token:
                    self._cancel_token = None
                    self._is_streaming = False

        return _gen()

    async def send_message_stream(
        self,
        messages: Sequence[MessageLike],
        on_chunk: ChunkCallback,
        options: RequestOptions | None = None,
    ) -> StreamResult:
        """Stream a completion, reporting each increment to ``on_chunk``.

        ``on_chunk`` receives ``(content_delta, content_total, thinking_delta,
        thinking_total)`` and may be a plain function or a coroutine function.
        Returns what was accumulated, which after ``abort()`` is everything
        received before the cancellation point.
        """
        result = StreamResult()
        async with aclosing(self.stream(messages, options)) as events:
            async for event in events:
                result = StreamResult(content=event.content_total, thinking=event.thinking_total)
                outcome = on_chunk(
                    event.content_delta,
                    event.content_total,
                    event.thinking_delta,
                    event.thinking_total,
                )
                if inspect.isawaitable(outcome):
                    await outcome
        return result

    def abort(self) -> None:
        """Signal the active stream to stop. A no-op when nothing is streaming."""
        if self._cancel_token is None:
            return
        _logger.info("Aborting active stream")
        self._cancel_token.cancel()
        self._is_streaming = False

    @staticmethod
    def _require_configured(profile: ProviderProfile) -> ProviderProfile:
        if not profile.is_configured:
            raise ConfigurationError(_NOT_CONFIGURED)
        return profile


def _serialize_message(message: MessageLike) -> dict[str, Any]:
    msg = message if isinstance(message, ChatMessage) else ChatMessage.model_validate(dict(message))
    content = msg.content if isinstance(msg.content, str) else [dict(part) for part in msg.content]
    return {"role": msg.role, "content": content}


def _first_choice_content(data: dict[str, Any]) -> str:
    first = data["choices"][0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""
