"""
Tests for structured logging configuration.
"""

import json
import logging

import pytest
import structlog
from recipecore.cleaner import HtmlCleaner, Strategy
from recipecore.config import HtmlCleanupConfig, MonitoringConfig
from recipecore.observability import configure_logging
from recipecore.observability.logging import add_correlation_id


def read_events(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


@pytest.fixture
def log_file(tmp_path):
    return tmp_path / "logs" / "recipecore.log"


class TestConfigureLogging:
    def test_json_file_output(self, log_file, tiny_html):
        configure_logging(MonitoringConfig(log_level="INFO", log_file=str(log_file)))

        HtmlCleaner(HtmlCleanupConfig()).process(tiny_html, "https://example.com/tiny")

        events = read_events(log_file)
        completed = [e for e in events if e["event"] == "HTML cleanup completed"]
        assert len(completed) == 1
        assert completed[0]["strategy"] == "FALLBACK"
        assert completed[0]["component"] == "HtmlCleaner"
        assert completed[0]["source"] == "https://example.com/tiny"
        assert completed[0]["level"] == "info"
        assert "timestamp" in completed[0]

    def test_level_filters_events(self, log_file, tiny_html):
        configure_logging(MonitoringConfig(log_level="WARNING", log_file=str(log_file)))

        HtmlCleaner(HtmlCleanupConfig()).process(tiny_html, "u")
        HtmlCleaner(HtmlCleanupConfig()).process("", "u")

        events = read_events(log_file)
        assert [e["event"] for e in events] == ["Empty HTML input"]
        assert logging.getLogger().level == logging.WARNING

    def test_stdlib_records_rendered_as_json(self, log_file):
        configure_logging(MonitoringConfig(log_level="DEBUG", log_file=str(log_file)))

        logging.getLogger("recipecore.cleaner.structured_data").debug("Invalid JSON-LD in script tag, skipping: %s", "x")

        events = read_events(log_file)
        assert events[-1]["event"] == "Invalid JSON-LD in script tag, skipping: x"
        assert events[-1]["logger"] == "recipecore.cleaner.structured_data"

    def test_strategy_failure_logged_as_error(self, log_file, cleanup_config):
        class Broken:
            name = Strategy.STRUCTURED_DATA
            enabled = True

            def evaluate(self, document):
                raise KeyError("missing")

        configure_logging(MonitoringConfig(log_level="ERROR", log_file=str(log_file)))

        HtmlCleaner(cleanup_config, strategies=[Broken()]).process("<p>x</p>", "u")

        events = read_events(log_file)
        assert len(events) == 1
        assert events[0]["event_type"] == "strategy_failed"
        assert events[0]["error_type"] == "KeyError"

    def test_console_output(self, capsys):
        configure_logging(MonitoringConfig(log_level="INFO"))

        structlog.get_logger("recipecore.test").info("console event", answer=42)

        assert "console event" in capsys.readouterr().err


class TestCorrelationId:
    def test_added_from_context(self):
        structlog.contextvars.bind_contextvars(correlation_id="req-1")
        try:
            event = add_correlation_id(None, "info", {"event": "x"})
        finally:
            structlog.contextvars.clear_contextvars()

        assert event["correlation_id"] == "req-1"

    def test_absent_without_context(self):
        assert "correlation_id" not in add_correlation_id(None, "info", {"event": "x"})
