"""The single inbound operation: raw user input in, bounded text out."""

from __future__ import annotations

from backend.reader.fetcher import GuardedFetcher
from backend.reader.models import FetchResult
from backend.reader.policy import validate_url


async def read_url_text(raw: str, fetcher: GuardedFetcher | None = None) -> FetchResult:
    """Validate *raw* and fetch its text through the reader service.

    Validation happens first and performs no I/O; only a URL that passes it
    reaches the fetcher.  Every failure is raised as a
    :class:`~backend.reader.errors.FetchFailure` subclass whose message can
    be shown to the user as-is.
    """
    url = validate_url(raw)
    return await (fetcher or GuardedFetcher()).fetch(url)
