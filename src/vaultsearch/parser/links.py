"""Wiki-link extraction and resolution."""

from __future__ import annotations

import re
from collections.abc import Sequence

from ..config import CONTENT_EXTENSIONS

# Pattern for [[link]] syntax - captures content between double brackets
# Handles [[path/to/note]], [[note]] and [[note|alias]] formats
LINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")


def extract_links(content: str) -> list[str]:
    """Extract wiki-link references from document text.

    Args:
        content: Raw document text.

    Returns:
        Link targets in order of appearance, cut at the ``|`` alias
        separator. Duplicates are kept.
    """
    return [match.split("|", 1)[0] for match in LINK_PATTERN.findall(content)]


def strip_content_extension(path: str, extensions: Sequence[str] = CONTENT_EXTENSIONS) -> str:
    """Remove a trailing content extension (e.g. ``.md``) if present."""
    for extension in extensions:
        if path.endswith(extension):
            return path[: -len(extension)]
    return path


def resolve_link_target(
    reference: str,
    keys: Sequence[str],
    extensions: Sequence[str] = CONTENT_EXTENSIONS,
) -> str | None:
    """Resolve a link reference to a document key.

    Attempts resolution in order, each rule scanning the whole corpus
    before the next one is tried:
    1. Key whose extension-less form equals the reference (this also
       covers a key equal to the reference plus a content extension)
    2. Key ending with ``/`` + reference + content extension

    Within a rule the first key in enumeration order wins.

    Args:
        reference: The link target from [[target]].
        keys: Document keys in enumeration order.
        extensions: Content extensions of the vault.

    Returns:
        Resolved key, or None if nothing matches.
    """
    normalized = reference.strip().replace("\\", "/").strip("/")
    if not normalized:
        return None
    stem = strip_content_extension(normalized, extensions)

    for key in keys:
        if strip_content_extension(key, extensions) == stem:
            return key

    suffixes = tuple(f"/{stem}{extension}" for extension in extensions)
    for key in keys:
        if key.endswith(suffixes):
            return key

    return None
