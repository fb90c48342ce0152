"""Data models for loosefeed."""

from dataclasses import dataclass


@dataclass
class FeedItem:
    """Represents a single RSS item or Atom entry."""

    title: str
    link: str
    description: str
    date_str: str
    timestamp: int  # Milliseconds since epoch, 0 when unknown
    source: str
    image_url: str = ""


@dataclass
class FeedSubscription:
    """Represents a feed subscription found in an OPML document."""

    name: str
    url: str
