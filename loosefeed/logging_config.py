"""Structured logging configuration for loosefeed."""

import json
import logging
import sys
from datetime import UTC, datetime

from .config import Config

# Context attributes copied from a record into the JSON line, in this order
CONTEXT_FIELDS = (
    "execution_id",
    "component",
    "source",
    "feed_format",
    "items_count",
    "skipped_count",
    "reason",
    "outlines_count",
    "subscriptions_count",
    "date_str",
    "error",
    "duration_seconds",
)

LOGGER_NAMES = [
    "loosefeed",
    "loosefeed.feed_parser",
    "loosefeed.opml_parser",
    "loosefeed.dates",
]


class StructuredFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        log_entry.update(
            (field, getattr(record, field))
            for field in CONTEXT_FIELDS
            if hasattr(record, field)
        )
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ExecutionLogger:
    """Parse-run logger that stamps every record with its execution context."""

    def __init__(self, execution_id: str, component: str):
        """Initialize execution logger.

        Args:
            execution_id: Identifier shared by the records of one parse run
            component: Component name ('feed_parser', 'opml_parser', 'dates')
        """
        self.execution_id = execution_id
        self.component = component
        self.logger = logging.getLogger(f"loosefeed.{component}")
        self.start_time: datetime | None = None

    def debug(self, message: str, **context) -> None:
        """Log a DEBUG record carrying the execution context."""
        if not self.logger.isEnabledFor(logging.DEBUG):
            return
        extra = {
            "execution_id": self.execution_id,
            "component": self.component,
            **context,
        }
        self.logger.debug(message, extra=extra)

    def log_parse_start(self, source: str, feed_format: str) -> None:
        self.start_time = datetime.now(UTC)
        self.debug(
            f"Parsing {feed_format} feed", source=source, feed_format=feed_format
        )

    def log_feed_parsed(
        self, source: str, feed_format: str, items_count: int, skipped_count: int
    ) -> None:
        """Log the outcome of parsing one feed document."""
        duration_seconds = None
        if self.start_time:
            duration_seconds = (datetime.now(UTC) - self.start_time).total_seconds()

        self.debug(
            f"Parsed {feed_format} feed: {items_count} items found",
            source=source,
            feed_format=feed_format,
            items_count=items_count,
            skipped_count=skipped_count,
            duration_seconds=duration_seconds,
        )

    def log_item_skipped(self, source: str, reason: str) -> None:
        self.debug(f"Item skipped: {reason}", source=source, reason=reason)


def setup_structured_logging(log_level: str | None = None) -> None:
    """Send loosefeed records to stdout as JSON lines.

    Args:
        log_level: Logging level name; LOOSEFEED_LOG_LEVEL when omitted
    """
    if log_level is None:
        log_level = Config().log_level
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(console_handler)

    for logger_name in LOGGER_NAMES:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


def create_execution_logger(
    component: str, execution_id: str | None = None
) -> ExecutionLogger:
    """Create an execution logger for a component.

    Args:
        component: Component name
        execution_id: Optional execution ID (will generate one if not provided)

    Returns:
        ExecutionLogger instance
    """
    if not execution_id:
        execution_id = f"exec_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"

    return ExecutionLogger(execution_id, component)
