"""Pydantic models for vault search results."""

from typing import Literal

from pydantic import BaseModel, Field, JsonValue

# Front-matter values: string | number | boolean | null | list | mapping, recursively
FrontmatterValue = JsonValue
Frontmatter = dict[str, JsonValue]

SearchField = Literal["content", "filename", "tag", "link", "frontmatter"]

SEARCH_FIELDS: tuple[str, ...] = ("content", "filename", "tag", "link", "frontmatter")


class MatchRecord(BaseModel):
    """A single matching line within a document."""

    line: int  # 1-based line number
    content: str  # The matching line
    context: str  # Surrounding lines, joined with newlines


class ContentResult(BaseModel):
    """A content or fuzzy search hit."""

    filename: str
    path: str  # Vault-relative key
    matches: list[MatchRecord] = Field(default_factory=list)
    score: int | None = None  # Only set by fuzzy search
    frontmatter: Frontmatter = Field(default_factory=dict)


class GraphResult(BaseModel):
    """A document's position in the link graph."""

    filename: str
    path: str
    outgoing_links: list[str] = Field(default_factory=list)
    incoming_links: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    frontmatter: Frontmatter = Field(default_factory=dict)


class VaultCandidate(BaseModel):
    """A directory that looks like a vault."""

    path: str
    name: str
    has_obsidian_folder: bool
