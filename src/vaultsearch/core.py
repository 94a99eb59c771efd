"""Core query operations for vaultsearch.

This module contains the business logic used by the CLI and by embedding
callers.

Design principles:
- All functions are async; each document read is a suspension point
- Parameters are validated before the vault is touched
- Every call works on an IndexSession; a fresh one is opened unless the
  caller passes its own
- Unreadable documents are skipped, never reported
"""

import logging
from pathlib import Path

from .config import DEFAULT_CONTEXT_LINES, DEFAULT_FUZZY_RESULTS, DEFAULT_MAX_DEPTH, DEFAULT_MAX_RESULTS
from .errors import DocumentNotFoundError, InvalidQueryError, VaultNotFoundError
from .fuzzy import fuzzy_rank
from .graph import LinkGraph, reachable_within
from .graph import is_connected as graph_is_connected
from .models import SEARCH_FIELDS, ContentResult, GraphResult, SearchField
from .search import search_documents
from .session import IndexSession

log = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Validation helpers
# ─────────────────────────────────────────────────────────────────────────────


def _validate_query(query: str) -> None:
    if not query or not query.strip():
        raise InvalidQueryError("Query cannot be empty.")


def _validate_max_results(max_results: int) -> None:
    if max_results < 1:
        raise InvalidQueryError(
            f"max_results must be at least 1 (got {max_results}).",
            {"max_results": max_results},
        )


def _validate_depth(max_depth: int) -> None:
    if max_depth < 0:
        raise InvalidQueryError(
            f"max_depth cannot be negative (got {max_depth}).",
            {"max_depth": max_depth},
        )


def _open_session(root: Path | str, session: IndexSession | None) -> IndexSession:
    """Use the caller's session or open one, failing if the vault is missing.

    An on-disk session must belong to root. Sessions over other filesystems
    (e.g. in-memory) carry no directory, so root only labels errors for them.
    """
    if session is None:
        root_path = Path(root)
        if not root_path.is_dir():
            raise VaultNotFoundError(
                f"Vault not found or not a directory: {root_path}",
                {"root": str(root_path)},
            )
        return IndexSession.open(root_path)

    if session.root is not None and session.root.resolve() != Path(root).resolve():
        raise InvalidQueryError(
            f"Session belongs to {session.root}, not {root}.",
            {"root": str(root), "session_root": str(session.root)},
        )
    if not session.root_exists():
        raise VaultNotFoundError(f"Vault not found or not a directory: {root}", {"root": str(root)})
    return session


def _resolve_document(graph: LinkGraph, reference: str, extensions: tuple[str, ...]) -> str:
    key = graph.resolve(reference, extensions)
    if key is None:
        raise DocumentNotFoundError(
            f"Document not found in vault: {reference}",
            {"reference": reference},
        )
    return key


# ─────────────────────────────────────────────────────────────────────────────
# Query operations
# ─────────────────────────────────────────────────────────────────────────────


async def search(
    root: Path | str,
    query: str,
    max_results: int = DEFAULT_MAX_RESULTS,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    field: SearchField = "content",
    include_content: bool = True,
    *,
    session: IndexSession | None = None,
) -> list[ContentResult]:
    """Search vault documents for a literal, case-insensitive substring.

    Args:
        root: Vault root directory.
        query: Search string (must not be blank).
        max_results: Result cap; scanning stops once it is reached.
        context_lines: Lines of context around each content match.
        field: Which part of a document to match: "content", "filename",
            "tag", "link" or "frontmatter".
        include_content: If True, content-field hits carry per-line matches.
        session: Optional session to reuse instead of reading the vault afresh.

    Returns:
        Matching documents in discovery order.

    Raises:
        InvalidQueryError: If a parameter is invalid.
        VaultNotFoundError: If root is not a directory.
    """
    _validate_query(query)
    _validate_max_results(max_results)
    if context_lines < 0:
        raise InvalidQueryError(
            f"context_lines cannot be negative (got {context_lines}).",
            {"context_lines": context_lines},
        )
    if field not in SEARCH_FIELDS:
        raise InvalidQueryError(
            f"Unknown search field '{field}'. Expected one of: {', '.join(SEARCH_FIELDS)}.",
            {"field": field},
        )

    session = _open_session(root, session)
    results = await search_documents(
        session.iter_documents(),
        query,
        max_results=max_results,
        context_lines=context_lines,
        field=field,
        include_content=include_content,
    )
    log.debug("search %r (%s): %d results", query, field, len(results))
    return results


async def fuzzy_search(
    root: Path | str,
    query: str,
    max_results: int = DEFAULT_FUZZY_RESULTS,
    *,
    session: IndexSession | None = None,
) -> list[ContentResult]:
    """Find notes by approximate filename and content matching.

    Args:
        root: Vault root directory.
        query: Search string (must not be blank).
        max_results: Number of top-scored results to return.
        session: Optional session to reuse.

    Returns:
        Results ordered by descending score, ties in discovery order.

    Raises:
        InvalidQueryError: If a parameter is invalid.
        VaultNotFoundError: If root is not a directory.
    """
    _validate_query(query)
    _validate_max_results(max_results)

    session = _open_session(root, session)
    results = await fuzzy_rank(
        session.iter_documents(),
        query,
        max_results=max_results,
        extensions=session.extensions,
    )
    log.debug("fuzzy_search %r: %d results", query, len(results))
    return results


async def graph_search(
    root: Path | str,
    seed: str | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    include_orphans: bool = False,
    *,
    session: IndexSession | None = None,
) -> list[GraphResult]:
    """Describe documents by their links, optionally around a seed document.

    Args:
        root: Vault root directory.
        seed: Optional document key or wiki-style reference. When given,
            only documents within max_depth hops of it are returned.
        max_depth: Hop bound for the seed filter (links followed both ways).
        include_orphans: If False, documents without any resolved link in
            either direction are left out.
        session: Optional session to reuse.

    Returns:
        One GraphResult per selected document, in discovery order.

    Raises:
        InvalidQueryError: If max_depth is negative.
        VaultNotFoundError: If root is not a directory.
        DocumentNotFoundError: If the seed does not resolve to a document.
    """
    _validate_depth(max_depth)

    session = _open_session(root, session)
    graph = await session.link_graph()

    connected: set[str] | None = None
    if seed is not None:
        seed_key = _resolve_document(graph, seed, session.extensions)
        connected = reachable_within(graph, seed_key, max_depth)

    results: list[GraphResult] = []
    async for document in session.iter_documents():
        if connected is not None and document.key not in connected:
            continue
        if not include_orphans and graph.is_orphan(document.key):
            continue
        results.append(
            GraphResult(
                filename=document.filename,
                path=document.key,
                outgoing_links=sorted(graph.outgoing(document.key)),
                incoming_links=sorted(graph.incoming(document.key)),
                tags=sorted(document.tags),
                frontmatter=document.frontmatter,
            )
        )

    log.debug("graph_search seed=%r depth=%d: %d results", seed, max_depth, len(results))
    return results


async def is_connected(
    root: Path | str,
    a: str,
    b: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    session: IndexSession | None = None,
) -> bool:
    """Check whether two documents are linked within max_depth hops.

    Links are followed in both directions. A document is connected to
    itself at any depth, including 0.

    Raises:
        InvalidQueryError: If max_depth is negative.
        VaultNotFoundError: If root is not a directory.
        DocumentNotFoundError: If either document does not resolve.
    """
    _validate_depth(max_depth)

    session = _open_session(root, session)
    graph = await session.link_graph()
    a_key = _resolve_document(graph, a, session.extensions)
    b_key = _resolve_document(graph, b, session.extensions)
    return graph_is_connected(graph, a_key, b_key, max_depth)
