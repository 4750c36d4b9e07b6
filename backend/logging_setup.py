"""Logging configuration shared by the API app and the CLI."""

from __future__ import annotations

import logging

from backend.config import settings

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once, at ``settings.log_level`` by default.

    Calling it again only adjusts the level; handlers are never duplicated.
    """
    resolved = (level or settings.log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=_FORMAT)
    root.setLevel(resolved)
    # httpx logs every request at INFO, which would echo full upstream URLs.
    logging.getLogger("httpx").setLevel(logging.WARNING)
