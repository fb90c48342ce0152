"""OPML subscription list parsing."""

from .logging_config import create_execution_logger
from .models import FeedSubscription
from .text import first_non_empty, iter_tags, parse_attributes


def _decode_amp(value: str) -> str:
    return value.replace("&amp;", "&")


def parse_opml(
    document: str | None, execution_id: str | None = None
) -> list[FeedSubscription]:
    """Parse an OPML document into feed subscriptions.

    Every <outline> carrying a non-empty ``xmlUrl`` yields one subscription,
    in document order and regardless of nesting depth. Category outlines
    without ``xmlUrl`` contribute nothing themselves. Only ``&amp;`` is
    decoded in names and URLs.

    Args:
        document: Raw OPML text
        execution_id: Execution ID for logging context

    Returns:
        List of FeedSubscription objects
    """
    logger = create_execution_logger("opml_parser", execution_id)

    subscriptions = []
    outlines = 0
    for tag in iter_tags(document, "outline"):
        outlines += 1
        attributes = parse_attributes(tag)
        xml_url = attributes.get("xmlurl", "")
        if not xml_url:
            continue

        url = _decode_amp(xml_url)
        name = first_non_empty(
            _decode_amp(attributes.get("title", "")),
            _decode_amp(attributes.get("text", "")),
            url,
        )
        subscriptions.append(FeedSubscription(name=name, url=url))

    logger.debug(
        f"Parsed OPML document: {len(subscriptions)} subscriptions found",
        outlines_count=outlines,
        subscriptions_count=len(subscriptions),
    )
    return subscriptions
