"""URL reader CLI — entry-point for the read pipeline.

Usage:
    python cli/main.py --help
    python cli/main.py read example.com/article
    python cli/main.py check http://192.168.1.1/
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from backend.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working
# directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
from typing import Optional

import typer

from backend.config import settings
from backend.logging_setup import configure_logging
from backend.reader import FetchFailure, read_url_text, validate_url

app = typer.Typer(
    name="reader",
    help="Read the text of a web page through the extraction service.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override LOG_LEVEL (DEBUG, INFO, WARNING …)."
    ),
) -> None:
    configure_logging(log_level)


@app.command("read")
def read(
    url: str = typer.Argument(..., help="URL or bare domain to read."),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
) -> None:
    """Validate URL, fetch it through the reader service and print its text."""
    try:
        result = asyncio.run(read_url_text(url))
    except FetchFailure as exc:
        typer.echo(f"[read] {exc.message}", err=True)
        raise typer.Exit(1) from exc

    if as_json:
        typer.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return

    typer.echo(f"[read] Source   : {result.source_url}", err=True)
    typer.echo(f"[read] Upstream : {result.upstream_url}", err=True)
    if result.truncated:
        typer.echo(
            f"[read] Truncated to {settings.max_content_chars} characters", err=True
        )
    typer.echo(result.content)


@app.command("check")
def check(
    url: str = typer.Argument(..., help="URL or bare domain to validate."),
) -> None:
    """Run the URL policy only (no network) and print the canonical URL."""
    try:
        canonical = validate_url(url)
    except FetchFailure as exc:
        typer.echo(f"[check] {exc.error_code}: {exc.message}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(canonical.href)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
