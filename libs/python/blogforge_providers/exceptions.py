"""Custom exceptions used by provider adapters and the generation gateway."""

from __future__ import annotations


class ProviderError(RuntimeError):
    """Base error raised for provider failures."""


class ProviderConfigError(ProviderError):
    """Raised when configuration is missing or invalid."""


class ProviderResponseError(ProviderError):
    """Raised when a provider returns an unusable response."""


class ProviderHTTPError(ProviderError):
    """Raised when a provider answers with a non-success status or the transport fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderRateLimitError(ProviderHTTPError):
    """Raised when a provider rejects a call with HTTP 429."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=429)


class GenerationUnavailable(ProviderError):
    """Raised when every provider candidate has been exhausted."""

    def __init__(self, message: str, *, last_error: str | None = None) -> None:
        super().__init__(message)
        self.last_error = last_error
