"""Document discovery and loading.

The loader walks a vault and yields root-relative document keys
(forward-slash separated, case-sensitive). Exclusion rules are data on
LoaderConfig and the filesystem itself is injectable, so tests and other
embedding contexts can run the same walk over an in-memory tree.

A document that cannot be read is skipped: the loader logs it at DEBUG and
carries on. Callers cannot tell a skipped document from one that did not
match; that is intentional and relied upon by corpus-wide scans.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from functools import cached_property
from pathlib import Path
from typing import NamedTuple, Protocol

from .config import CONTENT_EXTENSIONS, EXCLUDED_DIRS, HIDDEN_PREFIX, load_vault_overrides
from .models import Frontmatter
from .parser import DocumentMetadata, extract_metadata

log = logging.getLogger(__name__)


class DirEntry(NamedTuple):
    """One child of a directory listing."""

    name: str
    is_dir: bool
    is_file: bool


class VaultFilesystem(Protocol):
    """Read-only view of a vault, addressed by root-relative paths ("" is the root)."""

    def is_dir(self, path: str) -> bool: ...

    def list_dir(self, path: str) -> list[DirEntry]: ...

    def read_text(self, path: str) -> str: ...


class LocalVaultFilesystem:
    """VaultFilesystem backed by a directory on disk.

    Symlinks are not followed, which keeps the walk finite.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / path if path else self.root

    def is_dir(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def list_dir(self, path: str) -> list[DirEntry]:
        entries = []
        for child in self._resolve(path).iterdir():
            if child.is_symlink():
                continue
            entries.append(DirEntry(child.name, child.is_dir(), child.is_file()))
        return entries

    def read_text(self, path: str) -> str:
        return self._resolve(path).read_text(encoding="utf-8")


class MemoryVaultFilesystem:
    """VaultFilesystem over an in-memory mapping of key -> content.

    Bytes values are decoded as UTF-8 on read, so invalid byte sequences
    behave like an undecodable file on disk.
    """

    def __init__(self, files: Mapping[str, str | bytes]) -> None:
        self.files = dict(files)

    def is_dir(self, path: str) -> bool:
        if not path:
            return True
        prefix = f"{path}/"
        return any(key.startswith(prefix) for key in self.files)

    def list_dir(self, path: str) -> list[DirEntry]:
        prefix = f"{path}/" if path else ""
        if path and not self.is_dir(path):
            raise FileNotFoundError(path)

        children: dict[str, DirEntry] = {}
        for key in self.files:
            if not key.startswith(prefix):
                continue
            name, sep, _ = key[len(prefix) :].partition("/")
            children[name] = DirEntry(name, is_dir=bool(sep), is_file=not sep)
        return list(children.values())

    def read_text(self, path: str) -> str:
        try:
            content = self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None
        if isinstance(content, bytes):
            return content.decode("utf-8")
        return content


@dataclass(frozen=True)
class LoaderConfig:
    """Which entries of a vault count as documents."""

    hidden_prefix: str = HIDDEN_PREFIX
    exclude_dirs: frozenset[str] = frozenset(EXCLUDED_DIRS)
    extensions: tuple[str, ...] = CONTENT_EXTENSIONS
    # Extra predicates over root-relative keys; True means "exclude"
    exclude: tuple[Callable[[str], bool], ...] = field(default=())

    @classmethod
    def for_vault(cls, vault_root: Path, **overrides) -> LoaderConfig:
        """Build a config, applying the vault's .vaultsearch.yaml on top of defaults."""
        config = cls(**overrides)
        file_overrides = load_vault_overrides(Path(vault_root))
        if "exclude_dirs" in file_overrides:
            config = replace(config, exclude_dirs=frozenset(file_overrides["exclude_dirs"]))
        if "extensions" in file_overrides:
            config = replace(config, extensions=tuple(file_overrides["extensions"]))
        if "hidden_prefix" in file_overrides:
            config = replace(config, hidden_prefix=file_overrides["hidden_prefix"])
        return config

    def is_excluded(self, key: str, entry: DirEntry) -> bool:
        if self.hidden_prefix and entry.name.startswith(self.hidden_prefix):
            return True
        if entry.is_dir and entry.name in self.exclude_dirs:
            return True
        return any(predicate(key) for predicate in self.exclude)


def iter_document_keys(fs: VaultFilesystem, config: LoaderConfig | None = None) -> Iterator[str]:
    """Lazily enumerate document keys under the vault root.

    Directories are walked depth-first with entries in sorted name order,
    so the enumeration order is the same on every filesystem. A directory
    that cannot be listed is skipped.

    Args:
        fs: Filesystem view of the vault.
        config: Exclusion rules (defaults if omitted).

    Yields:
        Root-relative document keys.
    """
    config = config or LoaderConfig()
    yield from _walk(fs, config, "")


def _walk(fs: VaultFilesystem, config: LoaderConfig, directory: str) -> Iterator[str]:
    try:
        entries = sorted(fs.list_dir(directory), key=lambda entry: entry.name)
    except OSError as e:
        log.debug("Skipping unreadable directory %r: %s", directory, e)
        return

    for entry in entries:
        key = f"{directory}/{entry.name}" if directory else entry.name
        if config.is_excluded(key, entry):
            continue
        if entry.is_dir:
            yield from _walk(fs, config, key)
        elif entry.is_file and entry.name.endswith(config.extensions):
            yield key


@dataclass
class Document:
    """A vault document and its lazily derived metadata."""

    key: str
    text: str

    @property
    def filename(self) -> str:
        return self.key.rsplit("/", 1)[-1]

    @cached_property
    def metadata(self) -> DocumentMetadata:
        return extract_metadata(self.text)

    @property
    def frontmatter(self) -> Frontmatter:
        return self.metadata.frontmatter

    @property
    def tags(self) -> set[str]:
        return self.metadata.tags

    @property
    def links(self) -> list[str]:
        return self.metadata.links


class DocumentLoader:
    """Enumerates and reads the documents of one vault."""

    def __init__(self, fs: VaultFilesystem, config: LoaderConfig | None = None) -> None:
        self.fs = fs
        self.config = config or LoaderConfig()
        self._keys: list[str] | None = None

    @classmethod
    def for_root(cls, root: Path | str, config: LoaderConfig | None = None) -> DocumentLoader:
        root = Path(root)
        return cls(LocalVaultFilesystem(root), config or LoaderConfig.for_vault(root))

    def root_exists(self) -> bool:
        return self.fs.is_dir("")

    def keys(self) -> list[str]:
        """Document keys in enumeration order, walked once per loader."""
        if self._keys is None:
            self._keys = list(iter_document_keys(self.fs, self.config))
        return self._keys

    def read(self, key: str) -> Document | None:
        """Read one document, or None if it cannot be read or decoded."""
        try:
            text = self.fs.read_text(key)
        except (OSError, UnicodeDecodeError) as e:
            log.debug("Skipping unreadable document %s: %s", key, e)
            return None
        return Document(key=key, text=text)

    async def aread(self, key: str) -> Document | None:
        document = self.read(key)
        # Each read is a suspension point for cooperative callers
        await asyncio.sleep(0)
        return document

    async def iter_documents(self) -> AsyncIterator[Document]:
        """Yield readable documents in enumeration order."""
        for key in self.keys():
            document = await self.aread(key)
            if document is not None:
                yield document
