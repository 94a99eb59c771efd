"""Heuristic fuzzy matching of notes by filename and content.

Each document gets an additive score from five independent signals (see
the FUZZY_* weights in config). Scores are plain integers, so the ranking
can always be explained by listing which signals fired.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Sequence
from typing import NamedTuple

from .config import (
    CONTENT_EXTENSIONS,
    FUZZY_CONTENT_ALL_TOKENS,
    FUZZY_CONTENT_SUBSTRING,
    FUZZY_FILENAME_ALL_TOKENS,
    FUZZY_FILENAME_EXACT,
    FUZZY_FILENAME_SUBSTRING,
    FUZZY_MAX_SNIPPETS,
    FUZZY_SNIPPET_CONTEXT,
)
from .loader import Document
from .models import ContentResult, MatchRecord
from .parser import strip_content_extension
from .search import find_line_matches


class FuzzyScore(NamedTuple):
    """Score split into its filename and content parts."""

    filename: int
    content: int

    @property
    def total(self) -> int:
        return self.filename + self.content


def score_document(
    document: Document,
    query: str,
    extensions: Sequence[str] = CONTENT_EXTENSIONS,
) -> FuzzyScore:
    """Score one document against a query."""
    query_lower = query.lower()
    tokens = query_lower.split()
    stem = strip_content_extension(document.filename, extensions).lower()
    content_lower = document.text.lower()

    filename_score = 0
    if stem == query_lower:
        filename_score += FUZZY_FILENAME_EXACT
    if query_lower in stem:
        filename_score += FUZZY_FILENAME_SUBSTRING
    if all(token in stem for token in tokens):
        filename_score += FUZZY_FILENAME_ALL_TOKENS

    content_score = 0
    if query_lower in content_lower:
        content_score += FUZZY_CONTENT_SUBSTRING
    if all(token in content_lower for token in tokens):
        content_score += FUZZY_CONTENT_ALL_TOKENS

    return FuzzyScore(filename_score, content_score)


async def fuzzy_rank(
    documents: AsyncIterable[Document],
    query: str,
    *,
    max_results: int,
    extensions: Sequence[str] = CONTENT_EXTENSIONS,
) -> list[ContentResult]:
    """Rank documents by fuzzy score and return the top max_results.

    Ties keep discovery order. Results that scored on content carry up to
    FUZZY_MAX_SNIPPETS matching lines; filename-only results carry none.
    """
    scored: list[tuple[int, ContentResult]] = []

    async for document in documents:
        score = score_document(document, query, extensions)
        if score.total == 0:
            continue

        matches: list[MatchRecord] = []
        if score.content:
            matches = find_line_matches(
                document.text,
                query,
                FUZZY_SNIPPET_CONTEXT,
                limit=FUZZY_MAX_SNIPPETS,
            )

        scored.append(
            (
                score.total,
                ContentResult(
                    filename=document.filename,
                    path=document.key,
                    matches=matches,
                    score=score.total,
                    frontmatter=document.frontmatter,
                ),
            )
        )

    # list.sort is stable, so equal scores keep discovery order
    scored.sort(key=lambda item: item[0], reverse=True)
    return [result for _, result in scored[:max_results]]
