"""Guarded fetch through the upstream extraction service.

The fetcher never contacts the target site itself.  It asks the configured
reader service (``settings.reader_base_url``) for a plain-text rendering of
an already validated :class:`CanonicalURL` and bounds the answer in time and
size before handing it back.
"""

from __future__ import annotations

import asyncio
import logging
import re

import httpx

from backend.config import Settings, settings
from backend.reader.errors import (
    FetchTimeout,
    ResponseTooLarge,
    TransportError,
    UpstreamError,
)
from backend.reader.models import CanonicalURL, FetchResult

logger = logging.getLogger(__name__)

ACCEPT = "text/plain, text/markdown;q=0.9, */*;q=0.1"

# httpx adds these to every request unless told otherwise; the upstream only
# gets the Accept header.
_CLIENT_DEFAULT_HEADERS = ("User-Agent", "Accept-Encoding", "Connection")

_LINE_ENDINGS = re.compile(r"\r\n?")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def build_upstream_url(base_url: str, url: CanonicalURL) -> str:
    """Append the full href of *url* to the reader service base URL."""
    return f"{base_url.rstrip('/')}/{url.href}"


def declared_length(headers: httpx.Headers) -> int | None:
    """Return the ``Content-Length`` header as an int, or ``None``.

    Missing and non-numeric values both yield ``None``: the header is
    advisory and its absence is not an error.
    """
    value = headers.get("content-length", "").strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def normalize_text(text: str) -> str:
    """Convert every line ending to ``\\n`` and trim surrounding whitespace.

    Idempotent: ``normalize_text(normalize_text(t)) == normalize_text(t)``.
    """
    return _LINE_ENDINGS.sub("\n", text).strip()


def _decode(body: bytes, charset: str | None) -> str:
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def truncate_text(text: str, limit: int, marker: str) -> tuple[str, bool]:
    """Cut *text* to *limit* characters and append *marker* if it was longer."""
    if len(text) <= limit:
        return text, False
    return text[:limit] + marker, True


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------

class GuardedFetcher:
    """Fetch validated URLs through the reader service under fixed bounds.

    Args:
        config: Limits and upstream endpoint.  Defaults to the process-wide
            :data:`~backend.config.settings`.
        transport: Optional httpx transport, used by tests to stand in for
            the network.
    """

    def __init__(
        self,
        config: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or settings
        self._transport = transport

    async def fetch(self, url: CanonicalURL) -> FetchResult:
        """Fetch *url* and return its bounded, normalised text.

        Raises:
            UpstreamError: The reader service answered with a non-2xx status.
            ResponseTooLarge: Declared or received size above the byte cap.
            FetchTimeout: No complete answer within ``config.fetch_timeout``;
                the request is cancelled and its connection closed.
            TransportError: DNS, connection, TLS or protocol failure.
        """
        upstream_url = build_upstream_url(self.config.reader_base_url, url)
        logger.debug("Fetching %s via reader service", url.hostname)

        try:
            raw = await asyncio.wait_for(
                self._download(upstream_url), timeout=self.config.fetch_timeout
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Fetch of %s timed out after %.1fs", url.hostname, self.config.fetch_timeout
            )
            raise FetchTimeout() from exc

        content, truncated = truncate_text(
            normalize_text(raw),
            self.config.max_content_chars,
            self.config.truncation_marker,
        )
        if truncated:
            logger.info(
                "Content from %s truncated to %d characters",
                url.hostname,
                self.config.max_content_chars,
            )

        return FetchResult(
            source_url=url.href,
            upstream_url=upstream_url,
            content=content,
            truncated=truncated,
        )

    async def _download(self, upstream_url: str) -> str:
        """Issue the single GET and return the decoded body."""
        max_bytes = self.config.max_content_length
        try:
            async with httpx.AsyncClient(
                headers={"Accept": ACCEPT},
                timeout=self.config.fetch_timeout,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                for name in _CLIENT_DEFAULT_HEADERS:
                    client.headers.pop(name, None)

                async with client.stream("GET", upstream_url) as response:
                    if not response.is_success:
                        logger.warning("Reader service returned HTTP %d", response.status_code)
                        raise UpstreamError(response.status_code)

                    length = declared_length(response.headers)
                    if length and length > max_bytes:
                        logger.warning("Rejected response declaring %d bytes", length)
                        raise ResponseTooLarge()

                    body = bytearray()
                    async for chunk in response.aiter_bytes():
                        body.extend(chunk)
                        if len(body) > max_bytes:
                            logger.warning("Response exceeded %d bytes while reading", max_bytes)
                            raise ResponseTooLarge()

                    logger.debug(
                        "Reader service returned HTTP %d, %d bytes",
                        response.status_code,
                        len(body),
                    )
                    return _decode(bytes(body), response.charset_encoding)
        except httpx.TimeoutException as exc:
            raise FetchTimeout() from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Transport error talking to reader service: %s", type(exc).__name__)
            raise TransportError(f"Network error while fetching the URL: {exc}") from exc
