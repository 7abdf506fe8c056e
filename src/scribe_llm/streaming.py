"""Incremental parsing of OpenAI-style server-sent event streams."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Iterator
from typing import Any

from scribe_llm.types import StreamEvent

_logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
# first populated field wins; providers only ever emit one of these
THINKING_FIELDS = ("reasoning_content", "thinking", "reasoning")


class CancellationToken:
    """Cooperative stop signal shared between ``abort()`` and one read loop."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


async def _next_chunk(chunks: AsyncIterator[str]) -> str | None:
    try:
        return await chunks.__anext__()
    except StopAsyncIteration:
        return None


async def read_until_cancelled(chunks: AsyncIterator[str], token: CancellationToken) -> AsyncIterator[str]:
    """Yield chunks until the source is exhausted or ``token`` fires.

    Each read is raced against the token, so a stalled read is abandoned as soon
    as the stream is cancelled instead of when the next chunk arrives.
    """
    waiter = asyncio.ensure_future(token.wait())
    read: asyncio.Future[str | None] | None = None
    try:
        while not token.cancelled:
            read = asyncio.ensure_future(_next_chunk(chunks))
            await asyncio.wait({read, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if not read.done():
                return
            text = read.result()
            read = None
            if text is None:
                return
            yield text
    finally:
        waiter.cancel()
        if read is not None and not read.done():
            read.cancel()
            await asyncio.wait({read})


class SSELineDecoder:
    """Turns arbitrarily split text chunks into complete, non-blank lines.

    Network chunks can cut an event anywhere, so any trailing text without a
    newline is held back until the next ``feed`` (or ``flush`` at end of stream).
    """

    def __init__(self) -> None:
        self._pending = ""

    def feed(self, text: str) -> list[str]:
        buffered = self._pending + text
        *complete, self._pending = buffered.split("\n")
        return [line.rstrip("\r") for line in complete if line.strip()]

    def flush(self) -> list[str]:
        rest, self._pending = self._pending, ""
        rest = rest.rstrip("\r")
        return [rest] if rest.strip() else []


def parse_data_line(line: str) -> dict[str, Any] | None:
    """Return the JSON object carried by a ``data: `` line, or ``None`` to skip it."""
    if not line.startswith(DATA_PREFIX):
        return None

    data_str = line[len(DATA_PREFIX) :]
    if data_str.strip() == DONE_SENTINEL:
        return None

    try:
        event = json.loads(data_str)
    except json.JSONDecodeError:
        _logger.debug("Skipping non-JSON streaming chunk: %s", data_str)
        return None

    if not isinstance(event, dict):
        _logger.debug("Skipping non-object streaming chunk: %s", data_str)
        return None
    return event


def extract_deltas(event: dict[str, Any]) -> tuple[str, str]:
    """Extract ``(content, thinking)`` increments from ``choices[0].delta``."""
    choices = event.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return "", ""
    delta = choices[0].get("delta") or {}
    if not isinstance(delta, dict):
        return "", ""

    content = delta.get("content")
    content = content if isinstance(content, str) else ""

    thinking = ""
    for field in THINKING_FIELDS:
        value = delta.get(field)
        if isinstance(value, str) and value:
            thinking = value
            break

    return content, thinking


class StreamState:
    """Running totals for one streaming call; owned by that call alone."""

    def __init__(self) -> None:
        self.content = ""
        self.thinking = ""

    def consume(self, lines: list[str], token: CancellationToken) -> Iterator[StreamEvent]:
        """Apply decoded lines in order, yielding an event per non-empty increment.

        Stops before the next line once ``token`` has fired.
        """
        for line in lines:
            if token.cancelled:
                return
            event = parse_data_line(line)
            if event is None:
                continue
            content, thinking = extract_deltas(event)
            if not content and not thinking:
                continue
            self.content += content
            self.thinking += thinking
            yield StreamEvent(
                content_delta=content,
                content_total=self.content,
                thinking_delta=thinking,
                thinking_total=self.thinking,
            )
