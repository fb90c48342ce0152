"""Representative image resolution for feed items."""

from collections.abc import Callable, Iterator

from bs4 import BeautifulSoup

from .text import URL_ENTITIES, iter_tags, parse_attributes, replace_entities

# Entities decoded in description/summary text before looking for <img>
CONTENT_ENTITIES = [
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&amp;", "&"),
]


def _is_image_type(attributes: dict[str, str]) -> bool:
    return attributes.get("type", "").lower().startswith("image/")


def _tag_url(
    fragment: str,
    tag_name: str,
    accept: Callable[[dict[str, str]], bool] | None = None,
) -> str:
    """Return the ``url`` attribute of the first matching ``tag_name`` tag."""
    for tag in iter_tags(fragment, tag_name):
        attributes = parse_attributes(tag)
        url = attributes.get("url", "")
        if url and (accept is None or accept(attributes)):
            return url
    return ""


def _inline_image_url(content: str) -> str:
    """Return the ``src`` of the first <img> in entity-encoded HTML content.

    An <img> whose ``src`` is empty or only whitespace is passed over in
    favour of the next one.
    """
    if not content:
        return ""

    decoded = replace_entities(content, CONTENT_ENTITIES)
    if "<img" not in decoded.lower():
        return ""

    soup = BeautifulSoup(decoded, "html.parser")
    img = soup.find("img", src=lambda value: bool(value and value.strip()))
    if img is None:
        return ""
    return img["src"]


def _candidates(fragment: str, content: str) -> Iterator[Callable[[], str]]:
    # Priority order, first non-empty result wins
    yield lambda: _tag_url(fragment, "media:thumbnail")
    yield lambda: _tag_url(fragment, "media:content", _is_image_type)
    yield lambda: _tag_url(fragment, "media:content")
    yield lambda: _tag_url(fragment, "enclosure", _is_image_type)
    yield lambda: _inline_image_url(content)


def extract_image_url(fragment: str | None, content: str | None) -> str:
    """Resolve the most likely representative image for an item.

    Tries, in order: media:thumbnail, an image-typed media:content, any
    media:content, an image-typed enclosure, and finally the first inline
    <img> of the (entity-encoded) description. Attribute order inside a tag
    does not matter. Escaped query-string separators in the resolved URL are
    decoded.

    Args:
        fragment: Raw item/entry markup
        content: Raw description or summary text, before markup stripping

    Returns:
        Image URL, or "" if none was found
    """
    fragment = fragment or ""
    content = content or ""

    for candidate in _candidates(fragment, content):
        url = candidate()
        if url:
            return replace_entities(url, URL_ENTITIES)
    return ""
