"""Unit tests for logging configuration."""

import io
import json
import logging

import pytest
import structlog

from dslgen.core.config import Config
from dslgen.core.logging import bind_context, clear_context, get_logger, log_stage, setup_logging


@pytest.fixture
def stream():
    """Log destination; structlog and the root logger are restored afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield io.StringIO()
    clear_context()
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


def _events(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.startswith("{")]


class TestSetupLogging:
    def test_json_lines_carry_bound_module(self, stream):
        setup_logging(Config(log_format="json"), stream=stream)
        bind_context(module="Sample")

        get_logger("dslgen.test").info("Dispatch generated", attributes=2)

        event = _events(stream)[-1]
        assert event["event"] == "Dispatch generated"
        assert event["module"] == "Sample"
        assert event["attributes"] == 2
        assert event["level"] == "info"

    def test_level_filters_debug(self, stream):
        setup_logging(Config(log_format="json", log_level="INFO"), stream=stream)

        get_logger("dslgen.test").debug("Class scanned", facts=3)

        assert _events(stream) == []

    def test_auto_format_is_json_off_terminal(self, stream):
        setup_logging(Config(), stream=stream)

        get_logger("dslgen.test").warning("Duplicate view definition ignored", view="x.Root")

        assert _events(stream)[-1]["view"] == "x.Root"


class TestLogStage:
    def test_reports_duration(self, stream):
        setup_logging(Config(log_format="json", log_level="DEBUG"), stream=stream)
        logger = get_logger("dslgen.test")

        with log_stage(logger, "link", views=2):
            pass

        event = _events(stream)[-1]
        assert event["event"] == "Stage finished"
        assert event["stage"] == "link"
        assert event["views"] == 2
        assert event["duration_ms"] >= 0

    def test_failed_stage_is_not_reported(self, stream):
        setup_logging(Config(log_format="json", log_level="DEBUG"), stream=stream)

        with pytest.raises(ValueError):
            with log_stage(get_logger("dslgen.test"), "resolve"):
                raise ValueError("boom")

        assert _events(stream) == []


def test_log_format_from_env(monkeypatch):
    monkeypatch.setenv("DSLGEN_LOG_FORMAT", "console")
    assert Config.from_env().log_format == "console"
