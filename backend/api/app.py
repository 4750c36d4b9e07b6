"""FastAPI application factory.

Routers
-------
    /read      — validate a URL and return its text via the reader service
    /health    — liveness probe

Errors
------
Every :class:`~backend.reader.errors.FetchFailure` raised while serving a
request is turned into a JSON body ``{"detail": ..., "error_code": ...}``
with the status code from :data:`STATUS_CODES`.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.logging_setup import configure_logging
from backend.reader.errors import FetchFailure

from backend.api.routers import read as read_router

STATUS_CODES: dict[str, int] = {
    "invalid_input": 422,
    "blocked_target": 403,
    "upstream_error": 502,
    "response_too_large": 413,
    "timeout": 504,
    "transport_error": 502,
}


async def _fetch_failure_handler(request: Request, exc: FetchFailure) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_CODES.get(exc.error_code, 500),
        content={"detail": exc.message, "error_code": exc.error_code},
    )


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    configure_logging()

    app = FastAPI(
        title="URL Reader API",
        description=(
            "Reads a user-supplied URL through a trusted extraction service "
            "and returns its text, after checking it against an SSRF policy "
            "and bounding the response in time and size."
        ),
        version="0.1.0",
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FetchFailure, _fetch_failure_handler)
    app.include_router(read_router.router, prefix="/read", tags=["read"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Module-level instance used by uvicorn:
#   uvicorn backend.api.app:app --reload
app = create_app()
