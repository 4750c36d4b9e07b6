"""Tests for settings resolution and logging setup."""

from __future__ import annotations

import dataclasses
import logging

import pytest

from backend.config import Settings
from backend.logging_setup import configure_logging


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("READER_BASE_URL", "FETCH_TIMEOUT", "MAX_CONTENT_LENGTH", "MAX_CONTENT_CHARS"):
            monkeypatch.delenv(name, raising=False)

        s = Settings()

        assert s.reader_base_url == "https://r.jina.ai/"
        assert s.fetch_timeout == 20.0
        assert s.max_content_length == 5_000_000
        assert s.max_content_chars == 1_000_000
        assert s.truncation_marker.strip() == "[Content truncated]"

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("READER_BASE_URL", "https://reader.test/")
        monkeypatch.setenv("FETCH_TIMEOUT", "5")
        monkeypatch.setenv("MAX_CONTENT_CHARS", "100")

        s = Settings()

        assert s.reader_base_url == "https://reader.test/"
        assert s.fetch_timeout == 5.0
        assert s.max_content_chars == 100

    def test_settings_are_immutable(self) -> None:
        s = Settings()
        with pytest.raises(dataclasses.FrozenInstanceError):
            s.fetch_timeout = 1.0  # type: ignore[misc]

    def test_replace_builds_new_instance(self) -> None:
        s = Settings()
        t = dataclasses.replace(s, max_content_chars=10)
        assert t.max_content_chars == 10
        assert t is not s
        assert t.reader_base_url == s.reader_base_url


class TestConfigureLogging:
    def test_sets_root_level(self) -> None:
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging("debug")
            assert root.level == logging.DEBUG
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.setLevel(previous)
