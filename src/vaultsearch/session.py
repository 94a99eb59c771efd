"""Index sessions: the cache of one indexing pass over a vault.

A session owns the documents it has read and the link graph built from
them. Nothing is shared between sessions and nothing is persisted; a new
session always sees the vault as it is on disk now. Callers that run
several queries against an unchanged vault can pass one session to each
call, and call ``invalidate()`` when the vault changes.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from pathlib import Path

from .graph import LinkGraph, build_link_graph
from .loader import Document, DocumentLoader, LoaderConfig, LocalVaultFilesystem, VaultFilesystem

log = logging.getLogger(__name__)


class IndexSession:
    """Per-session cache of parsed documents and the link graph."""

    def __init__(self, loader: DocumentLoader) -> None:
        self.loader = loader
        self._read: dict[str, Document | None] = {}
        self._graph: LinkGraph | None = None

    @classmethod
    def open(cls, root: Path | str, config: LoaderConfig | None = None) -> IndexSession:
        """Open a session over a vault directory on disk."""
        return cls(DocumentLoader.for_root(root, config))

    @classmethod
    def from_filesystem(cls, fs: VaultFilesystem, config: LoaderConfig | None = None) -> IndexSession:
        return cls(DocumentLoader(fs, config))

    @property
    def extensions(self) -> tuple[str, ...]:
        return self.loader.config.extensions

    @property
    def root(self) -> Path | None:
        """Vault directory for on-disk sessions, None for other filesystems."""
        fs = self.loader.fs
        return fs.root if isinstance(fs, LocalVaultFilesystem) else None

    def root_exists(self) -> bool:
        return self.loader.root_exists()

    def invalidate(self) -> None:
        """Forget everything read so far; the next query re-reads the vault."""
        self.loader = DocumentLoader(self.loader.fs, self.loader.config)
        self._read.clear()
        self._graph = None

    async def iter_documents(self) -> AsyncIterator[Document]:
        """Yield readable documents in enumeration order, reading each at most once.

        Consumers may stop iterating early; documents not yet reached are
        simply not read.
        """
        for key in self.loader.keys():
            if key in self._read:
                document = self._read[key]
            else:
                document = await self.loader.aread(key)
                self._read[key] = document
            if document is not None:
                yield document

    async def documents(self) -> list[Document]:
        return [document async for document in self.iter_documents()]

    async def link_graph(self) -> LinkGraph:
        """The link graph for this session, built on first use."""
        if self._graph is None:
            self._graph = build_link_graph(await self.documents(), self.extensions)
        return self._graph
