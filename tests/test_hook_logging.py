"""Tests for hooks/_logging.py."""

import io
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "hooks"))

import _logging  # noqa: E402


@pytest.fixture
def fresh_root(monkeypatch):
    """Let configure_logging run again and undo what it attached."""
    monkeypatch.setattr(_logging, "_configured", False)
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLevelFromEnv:
    def test_default_is_warning(self, monkeypatch):
        monkeypatch.delenv(_logging.DEBUG_ENV, raising=False)
        monkeypatch.delenv(_logging.LOG_LEVEL_ENV, raising=False)

        assert _logging._level_from_env() == logging.WARNING

    def test_debug_shorthand(self, monkeypatch):
        monkeypatch.setenv(_logging.DEBUG_ENV, "1")

        assert _logging._level_from_env() == logging.DEBUG

    def test_named_level(self, monkeypatch):
        monkeypatch.delenv(_logging.DEBUG_ENV, raising=False)
        monkeypatch.setenv(_logging.LOG_LEVEL_ENV, "info")

        assert _logging._level_from_env() == logging.INFO

    def test_unknown_level_falls_back(self, monkeypatch):
        monkeypatch.delenv(_logging.DEBUG_ENV, raising=False)
        monkeypatch.setenv(_logging.LOG_LEVEL_ENV, "LOUD")

        assert _logging._level_from_env() == logging.WARNING


class TestConfigureLogging:
    def test_debug_lines_reach_stream(self, fresh_root, monkeypatch):
        monkeypatch.setenv(_logging.DEBUG_ENV, "1")
        stream = io.StringIO()

        _logging.configure_logging(stream)
        _logging.log_debug("review-runner", "hello")

        assert "[hooks.review-runner] DEBUG: hello" in stream.getvalue()

    def test_idempotent(self, fresh_root):
        before = len(fresh_root.handlers)

        _logging.configure_logging(io.StringIO())
        _logging.configure_logging(io.StringIO())

        assert len(fresh_root.handlers) == before + 1
