"""URL policy: turn an untrusted string into a :class:`CanonicalURL`.

Validation is purely local.  Nothing in this module touches the network, so a
rejected input can never cause outbound traffic.

Host classification works on the literal hostname, not on its DNS
resolution: a public name that resolves to a private address is allowed.
"""

from __future__ import annotations

import ipaddress
import logging
import re
from dataclasses import dataclass
from typing import Callable
from urllib.parse import quote, unquote, urlsplit

from backend.reader.errors import BlockedTarget, InvalidInput
from backend.reader.models import BlockReason, CanonicalURL, HostClassification

logger = logging.getLogger(__name__)

_SCHEME_PREFIX = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_ALLOWED_SCHEMES = ("http", "https")
_DEFAULT_PORTS = {"http": 80, "https": 443}
_STRIPPED_CHARS = str.maketrans("", "", "\t\n\r")
_FORBIDDEN_HOST_CHARS = set(" #%/:<>?@[\\]^|")

_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = _PATH_SAFE + "?"


# ---------------------------------------------------------------------------
# Address parsing
# ---------------------------------------------------------------------------

_DIGITS = {
    8: frozenset("01234567"),
    10: frozenset("0123456789"),
    16: frozenset("0123456789abcdefABCDEF"),
}


def _parse_ipv4_number(part: str) -> int:
    """Parse one dotted component: decimal, ``0x`` hex or leading-zero octal."""
    base = 10
    if part[:2] in ("0x", "0X"):
        part, base = part[2:], 16
        if not part:
            return 0
    elif len(part) > 1 and part.startswith("0"):
        part, base = part[1:], 8
    if not part or not set(part) <= _DIGITS[base]:
        raise ValueError(f"not a number: {part!r}")
    return int(part, base)


def _ends_in_number(host: str) -> bool:
    parts = host.split(".")
    if parts[-1] == "" and len(parts) > 1:
        parts.pop()
    last = parts[-1]
    if last and last.isascii() and last.isdigit():
        return True
    try:
        _parse_ipv4_number(last)
    except ValueError:
        return False
    return True


def parse_ipv4(host: str) -> ipaddress.IPv4Address | None:
    """Return the IPv4 address *host* denotes, or ``None`` for a plain name.

    Browsers accept shorthand forms such as ``127.1``, ``0x7f.0.0.1`` or
    ``2130706433`` for the same address; they are all recognised here so the
    policy sees the real target.

    Raises:
        ValueError: *host* looks numeric but is not a valid address.
    """
    if not host or not _ends_in_number(host):
        return None
    parts = host.split(".")
    if parts[-1] == "":
        parts.pop()
    if len(parts) > 4:
        raise ValueError(f"too many components in {host!r}")
    numbers = [_parse_ipv4_number(p) for p in parts]
    if any(n > 255 for n in numbers[:-1]):
        raise ValueError(f"component out of range in {host!r}")
    if numbers[-1] >= 256 ** (5 - len(numbers)):
        raise ValueError(f"last component out of range in {host!r}")
    value = numbers[-1]
    for i, n in enumerate(numbers[:-1]):
        value += n * 256 ** (3 - i)
    return ipaddress.IPv4Address(value)


def parse_ipv6(host: str) -> ipaddress.IPv6Address | None:
    """Return the IPv6 address for a (possibly bracketed) literal.

    Raises:
        ValueError: *host* is bracketed or contains ``:`` but is not a valid
            IPv6 literal.
    """
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" not in host and "[" not in host:
        return None
    return ipaddress.IPv6Address(host)


# ---------------------------------------------------------------------------
# Host rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Host:
    name: str
    ipv4: ipaddress.IPv4Address | None = None
    ipv6: ipaddress.IPv6Address | None = None
    unparsable: bool = False

    @property
    def octets(self) -> tuple[int, ...]:
        return tuple(self.ipv4.packed) if self.ipv4 else ()


@dataclass(frozen=True)
class HostRule:
    """A single blocking rule: *predicate* matches → blocked for *reason*."""

    reason: BlockReason
    predicate: Callable[[_Host], bool]


def _v4(test: Callable[[tuple[int, ...]], bool]) -> Callable[[_Host], bool]:
    return lambda h: h.ipv4 is not None and test(h.octets)


def _v6(test: Callable[[str], bool]) -> Callable[[_Host], bool]:
    return lambda h: h.ipv6 is not None and test(h.ipv6.compressed)


# Evaluated in order; the first match wins.  Anything unmatched is allowed,
# including IPv4/IPv6 ranges not listed here.
HOST_RULES: tuple[HostRule, ...] = (
    HostRule(BlockReason.EMPTY, lambda h: not h.name),
    HostRule(BlockReason.UNPARSABLE_ADDRESS, lambda h: h.unparsable),
    HostRule(
        BlockReason.LOCALHOST_NAME,
        lambda h: h.name == "localhost" or h.name.endswith(".localhost"),
    ),
    HostRule(BlockReason.INTERNAL_TLD, lambda h: h.name.endswith(".local")),
    # IPv4
    HostRule(BlockReason.PRIVATE_RANGE, _v4(lambda o: o[0] == 10)),
    HostRule(BlockReason.LOOPBACK, _v4(lambda o: o[0] == 127)),
    HostRule(BlockReason.RESERVED_ZERO, _v4(lambda o: o[0] == 0)),
    HostRule(BlockReason.LINK_LOCAL, _v4(lambda o: o[0] == 169 and o[1] == 254)),
    HostRule(BlockReason.PRIVATE_RANGE, _v4(lambda o: o[0] == 192 and o[1] == 168)),
    HostRule(BlockReason.PRIVATE_RANGE, _v4(lambda o: o[0] == 172 and 16 <= o[1] <= 31)),
    # IPv6
    HostRule(BlockReason.RESERVED_ZERO, _v6(lambda a: a == "::")),
    HostRule(BlockReason.LOOPBACK, _v6(lambda a: a == "::1")),
    HostRule(BlockReason.LINK_LOCAL, _v6(lambda a: a.startswith("fe80:"))),
    HostRule(BlockReason.UNIQUE_LOCAL, _v6(lambda a: a.startswith(("fc", "fd")))),
)


def _parse_host(hostname: str) -> _Host:
    name = hostname.strip().lower().rstrip(".")
    try:
        ipv6 = parse_ipv6(name)
        ipv4 = None if ipv6 else parse_ipv4(name)
    except ValueError:
        return _Host(name=name, unparsable=True)
    return _Host(name=name, ipv4=ipv4, ipv6=ipv6)


def classify_host(hostname: str, rules: tuple[HostRule, ...] = HOST_RULES) -> HostClassification:
    """Classify *hostname* as allowed or blocked.

    Case-insensitive; surrounding whitespace and a trailing root dot are
    ignored.  Pure function, no DNS lookup.
    """
    host = _parse_host(hostname)
    for rule in rules:
        if rule.predicate(host):
            return HostClassification(allowed=False, reason=rule.reason)
    return HostClassification(allowed=True)


# ---------------------------------------------------------------------------
# URL validation
# ---------------------------------------------------------------------------

def _canonical_host(raw_host: str, bracketed: bool) -> str:
    """Return the canonical serialisation of a host taken from a URL."""
    if bracketed:
        if "%" in raw_host:
            raise InvalidInput("Invalid URL format")
        try:
            return f"[{ipaddress.IPv6Address(raw_host).compressed}]"
        except ValueError as exc:
            raise InvalidInput("Invalid URL format") from exc

    host = unquote(raw_host).lower()
    if not host.isascii():
        try:
            host = host.encode("idna").decode("ascii")
        except UnicodeError as exc:
            raise InvalidInput("Invalid URL format") from exc
    if not host or any(c in _FORBIDDEN_HOST_CHARS or ord(c) < 0x20 or ord(c) == 0x7F for c in host):
        raise InvalidInput("Invalid URL format")
    try:
        ipv4 = parse_ipv4(host)
    except ValueError as exc:
        raise InvalidInput("Invalid URL format") from exc
    return str(ipv4) if ipv4 else host


def validate_url(raw: str) -> CanonicalURL:
    """Validate *raw* and return its canonical form.

    Inputs without a ``scheme://`` prefix are treated as ``https://`` URLs,
    so a bare ``example.com/a`` is accepted.

    Raises:
        InvalidInput: empty, unparsable, non-HTTP(S) or credentialed input.
        BlockedTarget: the host is rejected by :data:`HOST_RULES`.
    """
    text = (raw or "").strip().translate(_STRIPPED_CHARS)
    if not text:
        raise InvalidInput("Please enter a URL")

    if not _SCHEME_PREFIX.match(text):
        text = f"https://{text}"

    try:
        parts = urlsplit(text)
        port = parts.port
    except ValueError as exc:
        raise InvalidInput("Invalid URL format") from exc

    scheme = parts.scheme.lower()
    if scheme not in _ALLOWED_SCHEMES:
        raise InvalidInput("Only http/https URLs are supported")

    if parts.username or parts.password:
        raise InvalidInput("URLs containing a username or password are not supported")

    host_part = parts.netloc.rpartition("@")[2]
    bracketed = host_part.startswith("[")
    if bracketed:
        raw_host = host_part[1:host_part.find("]")] if "]" in host_part else ""
    else:
        raw_host = host_part.rpartition(":")[0] if port is not None or host_part.endswith(":") else host_part
    if not raw_host:
        raise InvalidInput("Invalid URL format")
    host = _canonical_host(raw_host, bracketed)

    verdict = classify_host(host)
    if verdict.blocked:
        # The target itself stays out of the log.
        logger.info("Rejected URL: host blocked (%s)", verdict.reason.value)
        raise BlockedTarget()

    if port == _DEFAULT_PORTS[scheme]:
        port = None
    path = quote(parts.path, safe=_PATH_SAFE) or "/"
    query = quote(parts.query, safe=_QUERY_SAFE)
    fragment = quote(parts.fragment, safe=_QUERY_SAFE)

    href = f"{scheme}://{host}"
    if port is not None:
        href += f":{port}"
    href += path
    if query:
        href += f"?{query}"
    if fragment:
        href += f"#{fragment}"

    return CanonicalURL(
        scheme=scheme,
        hostname=host.strip("[]"),
        port=port,
        path=path,
        query=query,
        fragment=fragment,
        href=href,
    )
