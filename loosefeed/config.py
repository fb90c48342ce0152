"""Configuration management for loosefeed."""

import os
from dataclasses import dataclass

DEFAULT_UNTITLED_TITLE = "Untitled"
DEFAULT_DATE_FORMAT = "%x"  # Host locale short date


@dataclass
class ParserConfig:
    """Configuration for feed parsing and display helpers."""

    untitled_title: str = DEFAULT_UNTITLED_TITLE
    date_format: str = DEFAULT_DATE_FORMAT


class Config:
    """Main configuration manager."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.log_level = os.getenv("LOOSEFEED_LOG_LEVEL") or "INFO"
        self.untitled_title = (
            os.getenv("LOOSEFEED_UNTITLED_TITLE") or DEFAULT_UNTITLED_TITLE
        )
        self.date_format = os.getenv("LOOSEFEED_DATE_FORMAT") or DEFAULT_DATE_FORMAT

    def get_parser_config(self) -> ParserConfig:
        """Get parser configuration."""
        return ParserConfig(
            untitled_title=self.untitled_title,
            date_format=self.date_format,
        )
