"""Failure taxonomy for the read pipeline.

Every failure leaving the validator or the fetcher is one of these classes.
Each carries a human-readable ``message`` that is safe to show to the caller
and a stable ``error_code`` used by the API layer for status mapping.
None of them carries partial content.
"""

from __future__ import annotations


class FetchFailure(Exception):
    """Base class for classified read failures."""

    error_code = "fetch_failed"
    default_message = "Failed to read the URL"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class InvalidInput(FetchFailure):
    """Malformed, empty, non-HTTP(S) or credentialed input."""

    error_code = "invalid_input"
    default_message = "Invalid URL"


class BlockedTarget(FetchFailure):
    """The host is rejected by the network policy."""

    error_code = "blocked_target"
    default_message = "This address is not allowed for security reasons"


class UpstreamError(FetchFailure):
    """The extraction service answered with a non-success status."""

    error_code = "upstream_error"

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        super().__init__(message or f"Fetch failed (HTTP {status})")


class ResponseTooLarge(FetchFailure):
    """Declared or received body size above the byte ceiling."""

    error_code = "response_too_large"
    default_message = "Content is too large and was rejected"


class FetchTimeout(FetchFailure):
    """No complete answer within the configured timeout."""

    error_code = "timeout"
    default_message = "Fetch timed out, please try again later"


class TransportError(FetchFailure):
    """DNS, connection, TLS or protocol failure talking to the upstream."""

    error_code = "transport_error"
    default_message = "Network error while fetching the URL"
