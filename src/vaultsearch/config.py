"""Configuration management for vaultsearch.

This module contains all configurable constants for vault indexing and search.
Magic numbers are documented here rather than scattered throughout the codebase.
"""

import logging
import os
from pathlib import Path
from typing import Any

from .errors import ConfigurationError

log = logging.getLogger(__name__)

# Explicit vault root override (takes precedence over auto-detection)
VAULT_ROOT_ENV = "VAULTSEARCH_VAULT_ROOT"

# Optional per-vault file with loader overrides. Hidden, so never indexed itself.
VAULT_CONFIG_FILENAME = ".vaultsearch.yaml"


def get_vault_root() -> Path:
    """Get the vault root directory.

    Discovery order:
    1. VAULTSEARCH_VAULT_ROOT environment variable (explicit override)
    2. Auto-detection over conventional directories (see locator)
    3. Error with helpful message

    Raises:
        ConfigurationError: If no vault can be found.
    """
    root = os.environ.get(VAULT_ROOT_ENV)
    if root:
        return Path(root)

    from .locator import auto_detect_vault

    detected = auto_detect_vault()
    if detected is not None:
        log.info("Auto-detected vault at %s", detected)
        return detected

    raise ConfigurationError(
        "No vault found. Options:\n"
        "  1. Pass --vault /path/to/vault\n"
        f"  2. Set {VAULT_ROOT_ENV} to an existing vault directory"
    )


def load_vault_overrides(vault_root: Path) -> dict[str, Any]:
    """Read loader overrides from the vault's .vaultsearch.yaml, if any.

    Recognized keys are ``exclude_dirs``, ``extensions`` and ``hidden_prefix``.
    A missing, unreadable or malformed file yields an empty mapping.

    Args:
        vault_root: Root directory of the vault.

    Returns:
        Mapping of recognized override keys to their values.
    """
    import yaml

    config_file = vault_root / VAULT_CONFIG_FILENAME
    if not config_file.is_file():
        return {}

    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        log.warning("Ignoring unreadable %s: %s", config_file, e)
        return {}

    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a mapping at top level", config_file)
        return {}

    overrides: dict[str, Any] = {}
    for key in ("exclude_dirs", "extensions"):
        value = data.get(key)
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            overrides[key] = value
        elif value is not None:
            log.warning("Ignoring %s in %s: expected a list of strings", key, config_file)
    hidden_prefix = data.get("hidden_prefix")
    if isinstance(hidden_prefix, str) and hidden_prefix:
        overrides["hidden_prefix"] = hidden_prefix
    return overrides


# =============================================================================
# Document Discovery
# =============================================================================

# Entries whose name starts with this prefix are hidden (.obsidian, .git, .trash)
HIDDEN_PREFIX = "."

# Directory names that never hold vault content
EXCLUDED_DIRS = ("node_modules",)

# File extensions treated as vault documents
CONTENT_EXTENSIONS = (".md",)


# =============================================================================
# Query Defaults
# =============================================================================

# Default result cap for content search
DEFAULT_MAX_RESULTS = 20

# Default lines of context before/after a content match
DEFAULT_CONTEXT_LINES = 2

# Default result cap for fuzzy search
DEFAULT_FUZZY_RESULTS = 10

# Default hop bound for graph connectivity
DEFAULT_MAX_DEPTH = 2


# =============================================================================
# Fuzzy Scoring
# =============================================================================

# Additive weights. A filename-exact hit (100) always outranks a document that
# only matches on content (20 + 10 at most).
FUZZY_FILENAME_EXACT = 100
FUZZY_FILENAME_SUBSTRING = 50
FUZZY_FILENAME_ALL_TOKENS = 30
FUZZY_CONTENT_SUBSTRING = 20
FUZZY_CONTENT_ALL_TOKENS = 10

# Snippets attached to a fuzzy result with a content component
FUZZY_MAX_SNIPPETS = 3

# Context lines on each side of a fuzzy snippet
FUZZY_SNIPPET_CONTEXT = 1


# =============================================================================
# Vault Locator
# =============================================================================

# Folder that marks a directory as an Obsidian vault
VAULT_MARKER_DIR = ".obsidian"

# How deep below each conventional directory to look for vaults
VAULT_SEARCH_DEPTH = 2

# Directory names preferred when several vaults are found, in priority order
VAULT_PRIORITY_NAMES = (
    "brain",
    "vault",
    "notes",
    "obsidian",
    "knowledge",
    "second-brain",
    "zettelkasten",
)

# Directories skipped while probing for vaults
VAULT_SEARCH_SKIP_DIRS = ("node_modules", "Library")
