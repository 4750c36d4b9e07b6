"""Centralised settings for the URL reader backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

The settings object is frozen: it is read once at startup and never mutated.
Tests that need different limits build their own instance with
:func:`dataclasses.replace` and hand it to the fetcher.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass(frozen=True)
class Settings:
    # ------------------------------------------------------------------
    # Upstream extraction service
    # ------------------------------------------------------------------
    reader_base_url: str = field(
        default_factory=lambda: os.environ.get("READER_BASE_URL", "https://r.jina.ai/")
    )

    # ------------------------------------------------------------------
    # Fetch bounds
    # ------------------------------------------------------------------
    fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("FETCH_TIMEOUT", "20.0"))
    )
    # Advisory ceiling on the declared Content-Length, and hard cap on the
    # number of body bytes buffered in memory.
    max_content_length: int = field(
        default_factory=lambda: int(os.environ.get("MAX_CONTENT_LENGTH", "5000000"))
    )
    # Authoritative cap on the normalised text, in characters.
    max_content_chars: int = field(
        default_factory=lambda: int(os.environ.get("MAX_CONTENT_CHARS", "1000000"))
    )
    truncation_marker: str = "\n\n[Content truncated]"

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )


# Module-level singleton — import this everywhere:
#   from backend.config import settings
settings = Settings()
