"""Request/response models shared by the client and its transport."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

Role = Literal["system", "user", "assistant"]


class PromptMode(str, Enum):
    """Closed set of assistant behavior presets."""

    QUICK = "quick"
    PLANNING = "planning"
    CHATTY = "chatty"
    BRAINSTORM = "brainstorm"
    AUTO = "auto"


class ChatMessage(BaseModel):
    """Single chat message.

    ``content`` is plain text, or a list of multipart content parts
    (``{"type": "text", ...}`` / ``{"type": "image_url", ...}``) for vision input.
    """

    role: Role
    content: str | list[dict[str, Any]]


class PromptContext(BaseModel):
    """Manuscript details woven into the system prompt."""

    title: str | None = None
    author: str | None = None
    project_type: str | None = None


class RequestOptions(BaseModel):
    """Per-call knobs for the main completion paths."""

    model: str | None = None
    temperature: float = 0.7
    max_output_tokens: int = 4096
    system_prompt: str | None = None
    mode: PromptMode | str | None = None
    context: PromptContext | None = None
    # merged last; keys here override every default, model and temperature included
    extra_fields: dict[str, Any] = Field(default_factory=dict)


class ConnectionResult(BaseModel):
    """Outcome of a connectivity probe. Never raised, always returned."""

    success: bool
    model: str | None = None
    error: str | None = None


class StreamEvent(BaseModel):
    """One increment of a streamed completion, with running totals."""

    content_delta: str = ""
    content_total: str = ""
    thinking_delta: str = ""
    thinking_total: str = ""


class StreamResult(BaseModel):
    """Accumulated text of a finished (or cancelled) stream."""

    content: str = ""
    thinking: str = ""
