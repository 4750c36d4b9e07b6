"""Tests for the ``/read`` router and the failure → HTTP status mapping.

Policy rejections run through the real pipeline (they never reach the
network).  Upstream outcomes are simulated by patching ``read_url_text`` in
the router module.
"""

from __future__ import annotations

from typing import Generator
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from backend.api.app import create_app
from backend.reader import (
    FetchResult,
    FetchTimeout,
    ResponseTooLarge,
    TransportError,
    UpstreamError,
)


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(create_app(), raise_server_exceptions=True) as c:
        yield c


def _result(content: str = "Hello", truncated: bool = False) -> FetchResult:
    return FetchResult(
        source_url="https://example.com/",
        upstream_url="https://r.jina.ai/https://example.com/",
        content=content,
        truncated=truncated,
    )


class TestReadEndpoint:
    def test_success_returns_result(self, client: TestClient) -> None:
        with patch(
            "backend.api.routers.read.read_url_text",
            new=AsyncMock(return_value=_result(truncated=True)),
        ) as mock_read:
            resp = client.post("/read", json={"url": "example.com"})

        assert resp.status_code == 200
        assert resp.json() == {
            "source_url": "https://example.com/",
            "upstream_url": "https://r.jina.ai/https://example.com/",
            "content": "Hello",
            "truncated": True,
        }
        mock_read.assert_awaited_once_with("example.com")

    def test_blocked_target_is_403(self, client: TestClient) -> None:
        resp = client.post("/read", json={"url": "http://127.0.0.1:8000/admin"})

        assert resp.status_code == 403
        body = resp.json()
        assert body["error_code"] == "blocked_target"
        assert "127.0.0.1" not in body["detail"]

    def test_invalid_input_is_422(self, client: TestClient) -> None:
        resp = client.post("/read", json={"url": "   "})

        assert resp.status_code == 422
        assert resp.json()["error_code"] == "invalid_input"

    def test_non_http_scheme_is_422(self, client: TestClient) -> None:
        resp = client.post("/read", json={"url": "file:///etc/passwd"})

        assert resp.status_code == 422
        assert resp.json()["detail"] == "Only http/https URLs are supported"

    def test_missing_body_field_is_rejected(self, client: TestClient) -> None:
        resp = client.post("/read", json={})
        assert resp.status_code == 422

    @pytest.mark.parametrize(
        ("failure", "status", "code"),
        [
            (UpstreamError(503), 502, "upstream_error"),
            (ResponseTooLarge(), 413, "response_too_large"),
            (FetchTimeout(), 504, "timeout"),
            (TransportError(), 502, "transport_error"),
        ],
    )
    def test_fetch_failures_map_to_status(
        self, client: TestClient, failure: Exception, status: int, code: str
    ) -> None:
        with patch(
            "backend.api.routers.read.read_url_text",
            new=AsyncMock(side_effect=failure),
        ):
            resp = client.post("/read", json={"url": "example.com"})

        assert resp.status_code == status
        assert resp.json() == {"detail": str(failure), "error_code": code}


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
