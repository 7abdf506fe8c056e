"""Package specific exception hierarchy."""


class ScribeLLMError(Exception):
    """Base exception for scribe_llm package."""


class ConfigurationError(ScribeLLMError):
    """Raised before any network attempt when credentials or model are missing."""


class ApiError(ScribeLLMError):
    """The server answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"API error: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


class TransportError(ScribeLLMError):
    """Network-level failure: DNS, connection reset, timeout."""
