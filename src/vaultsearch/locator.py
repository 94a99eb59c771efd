"""Vault discovery over conventional directories.

Looks for directories that hold an ``.obsidian`` folder or markdown files
a couple of levels below the usual places people keep notes, plus the
current working directory.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from .config import (
    CONTENT_EXTENSIONS,
    VAULT_MARKER_DIR,
    VAULT_PRIORITY_NAMES,
    VAULT_SEARCH_DEPTH,
    VAULT_SEARCH_SKIP_DIRS,
)
from .models import VaultCandidate

log = logging.getLogger(__name__)


def conventional_vault_dirs(home: Path | None = None) -> list[Path]:
    """Directories probed for vaults, most likely first."""
    home = home or Path.home()
    dirs = [
        home / "Documents",
        home / "Desktop",
        home / "Obsidian",
        home / "Vaults",
        home / "Notes",
        home / "OneDrive" / "Documents",
        home / "Dropbox",
        home / "iCloud Drive" / "Documents",
        home / "Google Drive",
    ]
    if sys.platform == "win32":
        dirs.extend(
            [
                home / "OneDrive" / "Desktop",
                home / "My Documents",
                Path("C:/Obsidian"),
                Path("D:/Obsidian"),
            ]
        )
    return dirs


def check_vault(directory: Path) -> VaultCandidate | None:
    """Return a candidate if directory looks like a vault, else None."""
    try:
        names = [child.name for child in directory.iterdir()]
    except OSError:
        return None

    has_obsidian_folder = VAULT_MARKER_DIR in names
    has_documents = any(name.endswith(CONTENT_EXTENSIONS) for name in names)
    if not (has_obsidian_folder or has_documents):
        return None
    return VaultCandidate(
        path=str(directory),
        name=directory.name,
        has_obsidian_folder=has_obsidian_folder,
    )


def _search_for_vaults(
    directory: Path,
    found: list[VaultCandidate],
    visited: set[Path],
    max_depth: int,
) -> None:
    if max_depth <= 0 or directory in visited:
        return
    visited.add(directory)

    candidate = check_vault(directory)
    if candidate is not None:
        found.append(candidate)
        return

    if max_depth <= 1:
        return

    try:
        children = sorted(directory.iterdir())
    except OSError as e:
        log.debug("Cannot list %s: %s", directory, e)
        return

    for child in children:
        if child.name.startswith(".") or child.name in VAULT_SEARCH_SKIP_DIRS:
            continue
        if child.is_dir():
            _search_for_vaults(child, found, visited, max_depth - 1)


def detect_vaults(
    search_dirs: list[Path] | None = None,
    cwd: Path | None = None,
) -> list[VaultCandidate]:
    """Find vault candidates below the search directories and at cwd.

    A directory that qualifies as a vault is not searched any deeper.
    """
    found: list[VaultCandidate] = []
    visited: set[Path] = set()

    for base in search_dirs if search_dirs is not None else conventional_vault_dirs():
        if not base.is_dir():
            continue
        _search_for_vaults(base, found, visited, VAULT_SEARCH_DEPTH)

    cwd = cwd or Path(os.getcwd())
    if cwd not in visited:
        candidate = check_vault(cwd)
        if candidate is not None:
            found.append(candidate)

    return found


def pick_vault(candidates: list[VaultCandidate]) -> VaultCandidate | None:
    """Choose the most likely vault among candidates.

    Preference order:
    1. Priority name (exact, case-insensitive) with an .obsidian folder
    2. Name containing a priority name
    3. First candidate with an .obsidian folder
    4. First candidate
    """
    if not candidates:
        return None

    for name in VAULT_PRIORITY_NAMES:
        for candidate in candidates:
            if candidate.name.lower() == name and candidate.has_obsidian_folder:
                return candidate

    for name in VAULT_PRIORITY_NAMES:
        for candidate in candidates:
            if name in candidate.name.lower():
                return candidate

    for candidate in candidates:
        if candidate.has_obsidian_folder:
            return candidate

    return candidates[0]


def auto_detect_vault(
    search_dirs: list[Path] | None = None,
    cwd: Path | None = None,
) -> Path | None:
    """Return the path of the most likely vault, or None if none was found."""
    chosen = pick_vault(detect_vaults(search_dirs, cwd))
    return Path(chosen.path) if chosen else None
