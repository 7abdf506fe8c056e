"""OpenAI-compatible chat completions transport for one resolved profile."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any, cast

import httpx

from scribe_llm.config import ProviderProfile
from scribe_llm.errors import ApiError, TransportError
from scribe_llm.streaming import CancellationToken, SSELineDecoder, StreamState, read_until_cancelled
from scribe_llm.types import StreamEvent

_CHAT_PATH = "chat/completions"


class OpenAICompatProvider:
    """Posts payloads to ``{endpoint_base}/chat/completions`` with bearer auth.

    The profile is fixed at construction, so a request in flight keeps using the
    endpoint and key it started with even if settings change underneath it.
    """

    _logger = logging.getLogger(__name__)

    def __init__(self, profile: ProviderProfile, client: httpx.AsyncClient) -> None:
        self._profile = profile
        self._client = client
        self._headers = {
            "Authorization": f"Bearer {profile.api_key}",
            "Content-Type": "application/json",
        }

    @property
    def url(self) -> str:
        return f"{self._profile.endpoint_base.rstrip('/')}/{_CHAT_PATH}"

    async def chat(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a buffered request and return the decoded JSON body."""
        self._logger.debug("POST %s model=%s", self.url, payload.get("model"))
        try:
            response = await self._client.post(self.url, headers=self._headers, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        return self._json_or_error(response)

    def stream(self, payload: dict[str, Any], token: CancellationToken) -> AsyncIterator[StreamEvent]:
        """Return an async iterator of content/thinking increments.

        Every network read is raced against ``token`` and the token is checked
        before every event; once it fires the pending read is abandoned, the
        response is closed and the partially read tail is dropped.
        """

        async def _gen() -> AsyncIterator[StreamEvent]:
            decoder = SSELineDecoder()
            state = StreamState()
            self._logger.debug("POST %s model=%s (stream)", self.url, payload.get("model"))

            try:
                async with self._client.stream(
                    "POST",
                    self.url,
                    headers=self._headers,
                    json=payload,
                ) as response:
                    if not response.is_success:
                        body = await response.aread()
                        self._logger.warning("Streaming request failed with status %s", response.status_code)
                        raise ApiError(response.status_code, body.decode(errors="replace"))

                    async with aclosing(read_until_cancelled(response.aiter_text(), token)) as chunks:
                        async for text in chunks:
                            for event in state.consume(decoder.feed(text), token):
                                yield event
                            if token.cancelled:
                                break

                    if token.cancelled:
                        self._logger.info("Stream cancelled; dropping unread data")
                        return
                    # a final event without a trailing newline
                    for event in state.consume(decoder.flush(), token):
                        yield event
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise TransportError(str(exc) or type(exc).__name__) from exc

        return _gen()

    def _json_or_error(self, response: httpx.Response) -> dict[str, Any]:
        if not response.is_success:
            self._logger.warning("Request failed with status %s", response.status_code)
            raise ApiError(response.status_code, response.text)
        try:
            data = response.json()
        except ValueError as exc:
            raise ApiError(response.status_code, response.text) from exc
        # some providers report failures as a 2xx body without choices
        if not isinstance(data, dict) or not isinstance(data.get("choices"), list) or not data["choices"]:
            self._logger.warning("Response with status %s carried no choices", response.status_code)
            raise ApiError(response.status_code, response.text)
        return cast(dict[str, Any], data)
