"""Markdown parsing: front-matter, tags and wiki-link extraction."""

from .links import extract_links, resolve_link_target, strip_content_extension
from .markdown import DocumentMetadata, extract_metadata, extract_tags, parse_frontmatter

__all__ = [
    "DocumentMetadata",
    "extract_metadata",
    "extract_tags",
    "parse_frontmatter",
    "extract_links",
    "resolve_link_target",
    "strip_content_extension",
]
