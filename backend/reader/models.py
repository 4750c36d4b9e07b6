"""Data models for the read pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BlockReason(str, Enum):
    """Why the host policy rejected a hostname."""

    EMPTY = "empty"
    LOCALHOST_NAME = "localhost-name"
    INTERNAL_TLD = "internal-tld"
    LOOPBACK = "loopback"
    PRIVATE_RANGE = "private-range"
    LINK_LOCAL = "link-local"
    UNIQUE_LOCAL = "unique-local"
    RESERVED_ZERO = "reserved-zero"
    UNPARSABLE_ADDRESS = "unparsable-address"


@dataclass(frozen=True)
class HostClassification:
    """Verdict of the host policy for a single hostname."""

    allowed: bool
    reason: BlockReason | None = None

    @property
    def blocked(self) -> bool:
        return not self.allowed


@dataclass(frozen=True)
class CanonicalURL:
    """A validated, absolute, credential-free http(s) URL.

    ``href`` is the serialised form used for every later decision and for the
    upstream request; the other fields are its parsed components.
    """

    scheme: str
    hostname: str
    port: int | None
    path: str
    query: str
    fragment: str
    href: str

    def __str__(self) -> str:
        return self.href


@dataclass(frozen=True)
class FetchResult:
    """The text returned for a successful read."""

    source_url: str
    upstream_url: str
    content: str
    truncated: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "source_url": self.source_url,
            "upstream_url": self.upstream_url,
            "content": self.content,
            "truncated": self.truncated,
        }
