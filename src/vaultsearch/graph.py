"""Wiki-link graph: forward links, backlinks and bounded connectivity."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .config import CONTENT_EXTENSIONS
from .loader import Document
from .parser import resolve_link_target

log = logging.getLogger(__name__)


@dataclass
class LinkGraph:
    """Forward and backward adjacency over resolved links.

    ``backward`` is always the exact transpose of ``forward``. Every
    document of the corpus has an entry in both maps, possibly empty.
    """

    keys: list[str] = field(default_factory=list)
    forward: dict[str, set[str]] = field(default_factory=dict)
    backward: dict[str, set[str]] = field(default_factory=dict)

    def __contains__(self, key: object) -> bool:
        return key in self.forward

    def outgoing(self, key: str) -> set[str]:
        return self.forward.get(key, set())

    def incoming(self, key: str) -> set[str]:
        return self.backward.get(key, set())

    def neighbors(self, key: str) -> set[str]:
        """Documents one hop away, following links in either direction."""
        return self.outgoing(key) | self.incoming(key)

    def is_orphan(self, key: str) -> bool:
        return not self.outgoing(key) and not self.incoming(key)

    def resolve(self, reference: str, extensions: Sequence[str] = CONTENT_EXTENSIONS) -> str | None:
        """Resolve a key or wiki-style reference to a document in this graph."""
        if reference in self.forward:
            return reference
        return resolve_link_target(reference, self.keys, extensions)


def build_link_graph(
    documents: Iterable[Document],
    extensions: Sequence[str] = CONTENT_EXTENSIONS,
) -> LinkGraph:
    """Build forward and backward adjacency in one pass.

    Link references that do not resolve to a document of the corpus are
    dropped; a dangling link is normal, not an error.

    Args:
        documents: The readable documents of the corpus, in enumeration order.
        extensions: Content extensions used during resolution.

    Returns:
        The populated LinkGraph.
    """
    documents = list(documents)
    keys = [document.key for document in documents]
    graph = LinkGraph(
        keys=keys,
        forward={key: set() for key in keys},
        backward={key: set() for key in keys},
    )

    resolved_cache: dict[str, str | None] = {}
    dangling = 0
    for document in documents:
        for reference in document.links:
            if reference not in resolved_cache:
                resolved_cache[reference] = resolve_link_target(reference, keys, extensions)
            target = resolved_cache[reference]
            if target is None:
                dangling += 1
                continue
            graph.forward[document.key].add(target)
            graph.backward[target].add(document.key)

    log.debug("Built link graph: %d documents, %d dangling links", len(keys), dangling)
    return graph


def _bfs_depths(graph: LinkGraph, start: str, max_depth: int) -> Iterable[tuple[str, int]]:
    """Yield (node, depth) breadth-first from start, treating links as undirected."""
    visited: set[str] = {start}
    queue: deque[tuple[str, int]] = deque([(start, 0)])

    while queue:
        node, depth = queue.popleft()
        yield node, depth
        if depth >= max_depth:
            continue
        for neighbor in sorted(graph.neighbors(node)):
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append((neighbor, depth + 1))


def is_connected(graph: LinkGraph, a: str, b: str, max_depth: int) -> bool:
    """Check whether two documents are within max_depth hops of each other.

    Links are traversed in both directions. A document is always connected
    to itself, even at depth 0.
    """
    if a == b:
        return True
    if max_depth <= 0:
        return False
    return any(node == b for node, _ in _bfs_depths(graph, a, max_depth))


def reachable_within(graph: LinkGraph, seed: str, max_depth: int) -> set[str]:
    """All documents connected to seed within max_depth hops, seed included."""
    if max_depth <= 0:
        return {seed}
    return {node for node, _ in _bfs_depths(graph, seed, max_depth)}
