"""Tolerant text helpers for loosely-formed feed markup.

Nothing in here is a conforming XML parser. Every helper works on raw text
with regular expressions, returns an empty value on a miss and never raises
on malformed input.
"""

import re
from collections.abc import Iterator

# Fixed decode order: &amp; first, then the remaining named references.
NAMED_ENTITIES = [
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
]

# Entities decoded in resolved URLs.
URL_ENTITIES = [
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
]

HEX_ENTITY_RE = re.compile(r"&#x([0-9a-fA-F]+);")
DEC_ENTITY_RE = re.compile(r"&#(\d+);")
WHITESPACE_RE = re.compile(r"\s+")
MARKUP_RE = re.compile(r"<[^>]+>")
ATTRIBUTE_RE = re.compile(r"""([\w:.-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")

MAX_CODE_POINT = 0x10FFFF
# Longest digit strings that can still name a code point (hex, decimal)
MAX_CODE_POINT_DIGITS = {16: 6, 10: 7}


def first_non_empty(*candidates: str | None) -> str:
    """Return the first truthy candidate, or an empty string.

    Fallback chains (title to placeholder, summary to content and so on)
    are written as ordered argument lists to this helper.
    """
    for candidate in candidates:
        if candidate:
            return candidate
    return ""


def replace_entities(text: str, entities: list[tuple[str, str]]) -> str:
    """Apply literal entity replacements once each, in list order."""
    for entity, char in entities:
        text = text.replace(entity, char)
    return text


def _decode_code_point(match: re.Match, base: int) -> str:
    digits = match.group(1).lstrip("0") or "0"
    if len(digits) > MAX_CODE_POINT_DIGITS[base]:
        return match.group(0)
    code_point = int(digits, base)
    if code_point > MAX_CODE_POINT:
        return match.group(0)
    return chr(code_point)


def extract_tag(fragment: str | None, tag_name: str) -> str:
    """Return the inner text of the first ``tag_name`` element in ``fragment``.

    Matching is case-insensitive and ignores attributes on the opening tag.
    A CDATA payload is returned verbatim; otherwise the raw inner text is
    returned with surrounding whitespace dropped. A missing tag yields "".
    """
    if not fragment:
        return ""

    name = re.escape(tag_name)
    pattern = re.compile(
        rf"<{name}[^>]*>\s*(?:<!\[CDATA\[([\s\S]*?)\]\]>|([\s\S]*?))\s*</{name}>",
        re.IGNORECASE,
    )
    match = pattern.search(fragment)
    if not match:
        return ""

    cdata, raw = match.groups()
    return (cdata if cdata is not None else raw) or ""


def clean_text(text: str | None) -> str:
    """Decode character references and collapse whitespace.

    Named references are decoded in a fixed order, one pass per rule, then
    hexadecimal and decimal numeric references. Every whitespace run becomes
    a single space and the result is trimmed.
    """
    if not text:
        return ""

    text = replace_entities(text, NAMED_ENTITIES)
    text = HEX_ENTITY_RE.sub(lambda m: _decode_code_point(m, 16), text)
    text = DEC_ENTITY_RE.sub(lambda m: _decode_code_point(m, 10), text)
    return WHITESPACE_RE.sub(" ", text).strip()


def strip_html(text: str | None) -> str:
    """Remove literal ``<...>`` markup. Entity-encoded markup is left alone."""
    if not text:
        return ""
    return MARKUP_RE.sub("", text)


def iter_tags(fragment: str | None, tag_name: str) -> Iterator[str]:
    """Yield every opening (or self-closing) ``tag_name`` tag in order.

    The name must be followed by whitespace, ``/`` or ``>`` so that
    ``media:content`` does not also match ``media:contents``.
    """
    if not fragment:
        return
    pattern = re.compile(rf"<{re.escape(tag_name)}(?=[\s/>])[^>]*>", re.IGNORECASE)
    for match in pattern.finditer(fragment):
        yield match.group(0)


def parse_attributes(tag: str) -> dict[str, str]:
    """Parse quoted attributes of a single tag into a lower-cased dict.

    The first occurrence of a repeated attribute wins.
    """
    attributes: dict[str, str] = {}
    for match in ATTRIBUTE_RE.finditer(tag):
        name = match.group(1).lower()
        value = match.group(2) if match.group(2) is not None else match.group(3)
        attributes.setdefault(name, value)
    return attributes
