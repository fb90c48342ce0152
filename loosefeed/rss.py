"""RSS/Atom feed parsing module for loosefeed."""

import re
from collections.abc import Iterator

from .config import Config, ParserConfig
from .dates import parse_timestamp
from .images import extract_image_url
from .logging_config import create_execution_logger
from .models import FeedItem
from .text import (
    clean_text,
    extract_tag,
    first_non_empty,
    iter_tags,
    parse_attributes,
    strip_html,
)

ITEM_RE = re.compile(r"<item[\s>]([\s\S]*?)</item>", re.IGNORECASE)
ENTRY_RE = re.compile(r"<entry[\s>]([\s\S]*?)</entry>", re.IGNORECASE)

RSS = "rss"
ATOM = "atom"


def iter_blocks(document: str | None, pattern: re.Pattern) -> Iterator[str]:
    """Yield the inner markup of each block matched by ``pattern``, in order."""
    if not document:
        return
    for match in pattern.finditer(document):
        yield match.group(1)


def resolve_atom_link(block: str) -> str:
    """Return the entry's rel="alternate" href, else the first link's href."""
    first_href = ""
    for tag in iter_tags(block, "link"):
        attributes = parse_attributes(tag)
        href = attributes.get("href", "")
        if not href:
            continue
        if attributes.get("rel", "").lower() == "alternate":
            return href
        first_href = first_href or href
    return first_href


def is_atom(document: str | None) -> bool:
    """Sniff whether a document is Atom: any literal "<feed" counts."""
    return bool(document) and "<feed" in document


class FeedParser:
    """Turns raw RSS/Atom text into normalized FeedItem records."""

    def __init__(
        self, config: ParserConfig | None = None, execution_id: str | None = None
    ):
        """Initialize FeedParser with configuration.

        Args:
            config: Parser configuration, read from the environment if omitted
            execution_id: Execution ID for logging context
        """
        self.config = config or Config().get_parser_config()
        self.logger = create_execution_logger("feed_parser", execution_id)

    def parse(self, document: str | None, source: str) -> list[FeedItem]:
        """Parse a feed document, routing to the Atom or RSS parser.

        Args:
            document: Raw feed text
            source: Label of the feed the document came from

        Returns:
            List of FeedItem objects in document order
        """
        if is_atom(document):
            return self.parse_atom(document, source)
        return self.parse_rss(document, source)

    def parse_rss(self, document: str | None, source: str) -> list[FeedItem]:
        """Parse every <item> block of an RSS document."""
        return self._parse_blocks(document, source, RSS)

    def parse_atom(self, document: str | None, source: str) -> list[FeedItem]:
        """Parse every <entry> block of an Atom document."""
        return self._parse_blocks(document, source, ATOM)

    def _parse_blocks(
        self, document: str | None, source: str, feed_format: str
    ) -> list[FeedItem]:
        self.logger.log_parse_start(source, feed_format)

        pattern = ENTRY_RE if feed_format == ATOM else ITEM_RE
        items = []
        skipped = 0
        for block in iter_blocks(document, pattern):
            item = self.normalize_item(block, source, feed_format)
            if item is None:
                skipped += 1
                self.logger.log_item_skipped(source, "no title and no link")
                continue
            items.append(item)

        self.logger.log_feed_parsed(source, feed_format, len(items), skipped)
        return items

    def normalize_item(
        self, block: str, source: str, feed_format: str = RSS
    ) -> FeedItem | None:
        """Normalize one <item> or <entry> block into a FeedItem.

        Args:
            block: Inner markup of the block
            source: Label of the originating feed
            feed_format: "rss" or "atom"

        Returns:
            FeedItem, or None when the block has neither title nor link
        """
        title = extract_tag(block, "title")

        if feed_format == ATOM:
            link = resolve_atom_link(block)
            description = first_non_empty(
                extract_tag(block, "summary"),
                extract_tag(block, "content"),
            )
            date_str = first_non_empty(
                extract_tag(block, "updated"),
                extract_tag(block, "published"),
            )
        else:
            link = extract_tag(block, "link")
            description = extract_tag(block, "description")
            date_str = extract_tag(block, "pubDate")

        if not title and not link:
            return None

        return FeedItem(
            title=first_non_empty(clean_text(title), self.config.untitled_title),
            link=link,
            description=clean_text(strip_html(description)),
            date_str=date_str,
            timestamp=parse_timestamp(date_str),
            source=source,
            image_url=extract_image_url(block, description),
        )


def parse_rss_feed(document: str | None, source: str) -> list[FeedItem]:
    """Parse an RSS 2.0 document into FeedItem records."""
    return FeedParser().parse_rss(document, source)


def parse_atom_feed(document: str | None, source: str) -> list[FeedItem]:
    """Parse an Atom document into FeedItem records."""
    return FeedParser().parse_atom(document, source)


def parse_feed(document: str | None, source: str) -> list[FeedItem]:
    """Parse an RSS or Atom document, picking the parser by sniffing."""
    return FeedParser().parse(document, source)
