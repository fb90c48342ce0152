"""Unit tests for structured logging."""

import json
import logging
import os
from io import StringIO
from unittest.mock import patch

import pytest

from loosefeed.logging_config import (
    ExecutionLogger,
    StructuredFormatter,
    create_execution_logger,
    setup_structured_logging,
)
from loosefeed.opml import parse_opml
from loosefeed.rss import parse_rss_feed


@pytest.fixture
def log_capture():
    """Capture structured log output on the root logger."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())

    root_logger = logging.getLogger()
    original_level = root_logger.level
    original_handlers = root_logger.handlers[:]
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    package_logger = logging.getLogger("loosefeed")
    original_package_level = package_logger.level
    package_logger.setLevel(logging.DEBUG)

    try:
        yield stream
    finally:
        root_logger.handlers.clear()
        root_logger.handlers.extend(original_handlers)
        root_logger.setLevel(original_level)
        package_logger.setLevel(original_package_level)
        handler.close()


def _records(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestLoggingUnit:
    """Unit tests for logging_config and the logging done by the parsers."""

    def test_create_execution_logger_generates_id(self):
        logger = create_execution_logger("feed_parser")
        assert isinstance(logger, ExecutionLogger)
        assert logger.execution_id.startswith("exec_")
        assert logger.logger.name == "loosefeed.feed_parser"

    def test_create_execution_logger_keeps_given_id(self):
        logger = create_execution_logger("opml_parser", "run-42")
        assert logger.execution_id == "run-42"

    def test_records_are_json_with_context(self, log_capture):
        logger = create_execution_logger("feed_parser", "run-1")
        logger.debug("hello", source="My Feed", feed_format="rss", items_count=2)

        record = _records(log_capture)[-1]
        assert record["message"] == "hello"
        assert record["level"] == "DEBUG"
        assert record["execution_id"] == "run-1"
        assert record["component"] == "feed_parser"
        assert record["source"] == "My Feed"
        assert record["feed_format"] == "rss"
        assert record["items_count"] == 2
        assert "location" in record

    def test_unknown_extras_are_not_rendered(self, log_capture):
        logging.getLogger("loosefeed.dates").debug("x", extra={"unrelated": 1})
        assert "unrelated" not in _records(log_capture)[-1]

    def test_nothing_is_emitted_above_debug(self, log_capture):
        logging.getLogger("loosefeed").setLevel(logging.INFO)
        parse_rss_feed("<item><title>A</title></item>", "Quiet Feed")
        parse_opml('<outline text="A" xmlUrl="https://x.com/rss"/>')
        assert _records(log_capture) == []

    def test_feed_parsing_is_logged(self, log_capture):
        xml = (
            "<item><title>A</title></item>"
            "<item><description>orphan</description></item>"
        )
        parse_rss_feed(xml, "Logged Feed")

        messages = [record["message"] for record in _records(log_capture)]
        assert messages == [
            "Parsing rss feed",
            "Item skipped: no title and no link",
            "Parsed rss feed: 1 items found",
        ]
        summary = _records(log_capture)[-1]
        assert summary["source"] == "Logged Feed"
        assert summary["items_count"] == 1
        assert summary["skipped_count"] == 1
        assert summary["duration_seconds"] >= 0

    def test_unparsable_date_is_logged(self, log_capture):
        parse_rss_feed("<item><title>A</title><pubDate>whenever</pubDate></item>", "S")

        record = next(r for r in _records(log_capture) if r["message"] == "Unparsable date")
        assert record["component"] == "dates"
        assert record["date_str"] == "whenever"
        assert record["error"]

    def test_opml_parsing_is_logged(self, log_capture):
        parse_opml('<outline text="A" xmlUrl="https://x.com/rss"/>')

        records = _records(log_capture)
        assert records[-1]["message"] == "Parsed OPML document: 1 subscriptions found"
        assert records[-1]["component"] == "opml_parser"
        assert records[-1]["subscriptions_count"] == 1

    def test_exceptions_are_formatted(self, log_capture):
        logger = logging.getLogger("loosefeed.feed_parser")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.exception("failed")

        record = _records(log_capture)[-1]
        assert "ValueError: boom" in record["exception"]

    def test_setup_structured_logging(self):
        root_logger = logging.getLogger()
        original_level = root_logger.level
        original_handlers = root_logger.handlers[:]
        try:
            with patch.dict(os.environ, {"LOOSEFEED_LOG_LEVEL": "debug"}, clear=True):
                setup_structured_logging()

            assert root_logger.level == logging.DEBUG
            assert len(root_logger.handlers) == 1
            assert isinstance(root_logger.handlers[0].formatter, StructuredFormatter)
            assert logging.getLogger("loosefeed.feed_parser").level == logging.DEBUG
        finally:
            root_logger.handlers.clear()
            root_logger.handlers.extend(original_handlers)
            root_logger.setLevel(original_level)
            for name in ("loosefeed", "loosefeed.feed_parser", "loosefeed.opml_parser", "loosefeed.dates"):
                logging.getLogger(name).setLevel(logging.NOTSET)
