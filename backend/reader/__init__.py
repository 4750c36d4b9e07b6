"""Reader package — URL policy, guarded fetch & the read operation."""

from backend.reader.errors import (
    BlockedTarget,
    FetchFailure,
    FetchTimeout,
    InvalidInput,
    ResponseTooLarge,
    TransportError,
    UpstreamError,
)
from backend.reader.fetcher import GuardedFetcher
from backend.reader.models import BlockReason, CanonicalURL, FetchResult, HostClassification
from backend.reader.policy import classify_host, validate_url
from backend.reader.service import read_url_text

__all__ = [
    "read_url_text",
    "validate_url",
    "classify_host",
    "GuardedFetcher",
    "CanonicalURL",
    "FetchResult",
    "HostClassification",
    "BlockReason",
    "FetchFailure",
    "InvalidInput",
    "BlockedTarget",
    "UpstreamError",
    "ResponseTooLarge",
    "FetchTimeout",
    "TransportError",
]
