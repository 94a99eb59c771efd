"""Front-matter and tag extraction for vault documents.

Front-matter is read with a deliberately small grammar: one ``key: value``
pair per line inside the leading ``---`` block. Values wrapped in quotes
lose the quotes, and values that look like JSON arrays or objects are
decoded as JSON when possible. Nothing in here raises on bad input; a
malformed block simply yields an empty mapping.
"""

from __future__ import annotations

import json
import re
from typing import NamedTuple

from frontmatter.default_handlers import YAMLHandler
from pydantic import JsonValue

from ..models import Frontmatter
from .links import extract_links

# Inline tags: #tag, #multi-word-tag, #nested/tag (kept with the leading #)
INLINE_TAG_PATTERN = re.compile(r"#[\w\-/]+")

# One leading and one trailing quote character
_QUOTE_PATTERN = re.compile(r"^[\"']|[\"']$")

_BOUNDARY_HANDLER = YAMLHandler()


class DocumentMetadata(NamedTuple):
    """Everything derived from a document's raw text."""

    frontmatter: Frontmatter
    tags: set[str]
    links: list[str]


def _split_frontmatter_block(text: str) -> str | None:
    """Return the text between the leading ``---`` markers, or None."""
    if not _BOUNDARY_HANDLER.detect(text):
        return None
    try:
        block, _ = _BOUNDARY_HANDLER.split(text)
    except ValueError:
        # Opening marker without a closing one
        return None
    return block


def _parse_value(raw: str) -> JsonValue:
    value = _QUOTE_PATTERN.sub("", raw)
    if value.startswith("[") or value.startswith("{"):
        try:
            return json.loads(value)
        except (ValueError, RecursionError):
            # Malformed or too deeply nested to decode
            return value
    return value


def parse_frontmatter(text: str) -> Frontmatter:
    """Parse the leading front-matter block of a document.

    Args:
        text: Raw document text.

    Returns:
        Ordered mapping of keys to values. Empty when the document has no
        (complete) front-matter block.
    """
    block = _split_frontmatter_block(text)
    if block is None:
        return {}

    result: Frontmatter = {}
    for line in block.splitlines():
        colon_index = line.find(":")
        if colon_index <= 0:
            continue
        key = line[:colon_index].strip()
        if not key:
            continue
        result[key] = _parse_value(line[colon_index + 1 :].strip())
    return result


def _frontmatter_tags(frontmatter: Frontmatter) -> set[str]:
    raw = frontmatter.get("tags")
    items = raw if isinstance(raw, list) else [raw]

    tags: set[str] = set()
    for item in items:
        if isinstance(item, bool) or item is None:
            continue
        if isinstance(item, (int, float)):
            item = str(item)
        if isinstance(item, str) and item.strip():
            tags.add(item.strip())
    return tags


def extract_tags(text: str, frontmatter: Frontmatter | None = None) -> set[str]:
    """Collect a document's tags.

    Unions the front-matter ``tags`` field (a string or a list) with inline
    ``#tag`` tokens found anywhere in the raw text, front-matter included.
    Inline tags keep their leading ``#``, so ``#work`` and a front-matter
    ``work`` are distinct tags.

    Args:
        text: Raw document text.
        frontmatter: Already-parsed front-matter, parsed from ``text`` if omitted.

    Returns:
        Set of case-sensitive tag strings.
    """
    if frontmatter is None:
        frontmatter = parse_frontmatter(text)

    tags = _frontmatter_tags(frontmatter)
    tags.update(INLINE_TAG_PATTERN.findall(text))
    return tags


def extract_metadata(text: str) -> DocumentMetadata:
    """Derive front-matter, tags and raw link references from document text."""
    frontmatter = parse_frontmatter(text)
    return DocumentMetadata(
        frontmatter=frontmatter,
        tags=extract_tags(text, frontmatter),
        links=extract_links(text),
    )
