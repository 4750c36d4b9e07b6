"""Read endpoint.

Routes
------
POST /read    Body: {"url": "example.com/article"}    → read_url_text
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from backend.reader import read_url_text

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ReadRequest(BaseModel):
    # Raw user input; checked by backend.reader.policy, not by pydantic.
    url: str


class ReadResponse(BaseModel):
    source_url: str
    upstream_url: str
    content: str
    truncated: bool


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=ReadResponse)
async def read_endpoint(body: ReadRequest) -> dict[str, Any]:
    """Validate the URL, fetch it through the reader service, return its text.

    Failures are rendered by the ``FetchFailure`` handler registered in
    :func:`backend.api.app.create_app`.
    """
    result = await read_url_text(body.url)
    return result.to_dict()
