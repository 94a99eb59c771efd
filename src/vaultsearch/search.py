"""Literal content search over vault documents.

Results come back in discovery order; no ranking is applied here. The
scan stops as soon as the result cap is reached.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterable

from .loader import Document
from .models import ContentResult, MatchRecord, SearchField


def _split_lines(text: str) -> list[str]:
    return [line.rstrip("\r") for line in text.split("\n")]


def find_line_matches(
    text: str,
    query: str,
    context_lines: int,
    limit: int | None = None,
) -> list[MatchRecord]:
    """Find every line containing the query (case-insensitive).

    Args:
        text: Document text.
        query: Query string.
        context_lines: Lines of context before and after each match,
            clipped to the document bounds.
        limit: Stop after this many matches (None for all).

    Returns:
        One MatchRecord per matching line, in line order.
    """
    query_lower = query.lower()
    lines = _split_lines(text)
    matches: list[MatchRecord] = []

    for index, line in enumerate(lines):
        if query_lower not in line.lower():
            continue
        start = max(0, index - context_lines)
        end = min(len(lines), index + context_lines + 1)
        matches.append(
            MatchRecord(
                line=index + 1,
                content=line,
                context="\n".join(lines[start:end]),
            )
        )
        if limit is not None and len(matches) >= limit:
            break

    return matches


def serialize_frontmatter(document: Document) -> str:
    """Compact JSON form of a document's front-matter, used for matching."""
    return json.dumps(document.frontmatter, ensure_ascii=False, separators=(",", ":"))


def field_matches(document: Document, query: str, field: SearchField) -> bool:
    """Whether the selected field of a document contains the query (case-insensitive)."""
    query_lower = query.lower()

    if field == "filename":
        return query_lower in document.filename.lower()
    if field == "tag":
        return any(query_lower in tag.lower() for tag in document.tags)
    if field == "link":
        return any(query_lower in link.lower() for link in document.links)
    if field == "frontmatter":
        return query_lower in serialize_frontmatter(document).lower()
    return query_lower in document.text.lower()


async def search_documents(
    documents: AsyncIterable[Document],
    query: str,
    *,
    max_results: int,
    context_lines: int,
    field: SearchField,
    include_content: bool,
) -> list[ContentResult]:
    """Scan documents for the query and collect hits in discovery order.

    Only content-field searches with include_content produce match records;
    other fields report which documents matched.
    """
    results: list[ContentResult] = []

    async for document in documents:
        if not field_matches(document, query, field):
            continue

        matches: list[MatchRecord] = []
        if include_content and field == "content":
            matches = find_line_matches(document.text, query, context_lines)

        results.append(
            ContentResult(
                filename=document.filename,
                path=document.key,
                matches=matches,
                frontmatter=document.frontmatter,
            )
        )
        if len(results) >= max_results:
            break

    return results
